#
# Crypto-invoice -- Cryptocurrency Invoice Totals, Pricing and PDF Generation
#
# Copyright (c) 2022, Dominion Research & Development Corp.
#
# Crypto-invoice is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License as published by the Free Software
# Foundation, either version 3 of the License, or (at your option) any later
# version.  It is also available under alternative (eg. Commercial) licenses, at
# your option.  See the LICENSE file at the top of the source tree.
#
# Crypto-invoice is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE. See the GNU General Public License for more details.
#

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

#
# Money precision.  Fiat amounts are carried to the cent; cryptocurrency amounts to the Sat(oshi),
# ie. 1/10^8 of a Bitcoin.
#
FIAT_DECIMALS			= 2
CRYPTO_DECIMALS			= 8

INVOICE_CURRENCY		= "USD"
INVOICE_CRYPTO			= "BTC"
INVOICE_LABEL			= "Invoice"
INVOICE_VENDOR			= "CryptoInvoicePro"
INVOICE_SENDER			= "Your Business Name"
INVOICE_CLIENT			= "Client Name"
INVOICE_FORMAT			= 'totalize'  # 'presto'  # 'orgtbl'
INVOICE_ROWS			= 36  # text rows in the body of each invoice page
INVOICE_DESCRIPTION_MAX		= 40
INVOICE_STRFTIME		= "%Y-%m-%d"
INVOICE_FOOTER			= "Thank you for your business. Pay by bank transfer or other agreed method."
INVOICE_FOOTER_CRYPTO		= (
    "This invoice includes crypto payment instructions. Payment confirmation occurs on-chain and"
    " may take several confirmations depending on the network."
)
INVOICE_UNPRICED		= "price unavailable"

STATUS_UNPAID			= "Unpaid"
STATUS_PAID			= "Paid"

#
# Price Resolution.  Each source is attempted once, in order, w/ its own timeout; the first
# positive rate wins.  The provenance tags identify the source which produced a rate.
#
PRICE_TIMEOUT			= 5.0
PRICE_CACHE_MAXAGE		= 30  # seconds a caller's PriceCache entry remains fresh

SOURCE_CALLER			= "caller-supplied"
SOURCE_CACHE			= "edge-cache"
SOURCE_MARKET			= "direct-market-api"
SOURCE_PEGGED			= "stable-peg"
SOURCE_UNPRICED			= "unpriced"

# The same-origin price endpoint (eg. "https://example.com/api/getCryptoPrice") is deployment
# specific; if unconfigured, that step of the resolution chain is skipped.
PRICE_URL_ENV			= "CRYPTO_INVOICE_PRICE_URL"
MARKET_URL_ENV			= "CRYPTO_INVOICE_MARKET_URL"
MARKET_URL			= "https://api.coingecko.com/api/v3/simple/price"

# Market API coin ids <-> short ticker symbols.  By convention, symbols are upper-case and ids
# lower-case; the price lookup endpoint reports lower-case symbols.
COIN_IDS			= {
    "BTC":		"bitcoin",
    "ETH":		"ethereum",
    "USDC":		"usd-coin",
    "USDT":		"tether",
    "SOL":		"solana",
    "DAI":		"dai",
}
COIN_SYMBOLS			= { i: s for s,i in COIN_IDS.items() }

# USD-pegged stablecoins; if every source fails, these are assumed to trade at par w/ USD
STABLECOINS			= ("USDT", "USDC", "DAI")

PRICE_COINS			= ("bitcoin", "ethereum")   # Default basket for the price lookup endpoint
PRICE_VS			= "usd"
PRICE_CACHE_CONTROL		= "s-maxage=15, stale-while-revalidate=30"

#
# Invoice record storage.  A simple JSON key-value file standing in for browser-local storage;
# keys are namespaced.
#
STORE_ENV			= "CRYPTO_INVOICE_STORE"
STORE_FILE			= "crypto-invoice.json"
STORE_INVOICES			= "cryptoinvoice:invoices"
STORE_PROFILE			= "cryptoinvoice:profile"

#
# PDF Layout
#
MM_IN				= 25.4
PT_IN				= 72

PAPER				= 'A4'
PAPER_FORMATS			= dict(
    Letter	= 'Letter',
    Legal	= 'Legal',
    A4		= 'A4',
)
ORIENTATION			= 'portrait'
PAGE_MARGIN			= 1/2  # inches

FONTS				= dict(
    sans	= 'helvetica',
    mono	= 'courier',
)

FILENAME_KEYWORDS		= ['name', 'date', 'crypto']
FILENAME_FORMAT			= "{name}-{date}.pdf"

COLOR				= dict(
    vendor	= 0xFFB86C,     # Orange
    label	= 0x7C5CFF,     # Violet
    caption	= 0x9AA6B2,     # Slate
    text	= 0x222222,     # Near-black
    total	= 0x00E0D1,     # Turquoise
    panel	= 0x071229,     # Midnight
    panel_text	= 0xFFFFFF,
    watermark	= 0x888888,     # Medium grey
)

# QR code colors for payment URIs; dark modules on a light background scan most reliably
QR_FILL				= "#071229"
QR_BACK				= "white"
