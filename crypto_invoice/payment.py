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
from __future__		import annotations

import io
import logging

from dataclasses	import dataclass
from typing		import Optional

import qrcode

from .defaults		import INVOICE_UNPRICED, QR_FILL, QR_BACK
from .errors		import RenderingError
from .money		import Number, decimal, round8, format_amount, to_number

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

log				= logging.getLogger( "payment" )


@dataclass( frozen=True )
class CryptoQuote:
    """The amount of a cryptocurrency payable for a fiat total, at a rate.  If the rate was not
    positive, no quote is available: the amount is 0, but must be displayed as "price unavailable",
    never as a 0 amount due.

    """
    symbol: str
    rate: float
    amount: float

    @property
    def priced( self ) -> bool:
        return self.rate > 0

    def display( self ) -> str:
        if not self.priced:
            return INVOICE_UNPRICED
        return f"{format_amount( self.amount )} {self.symbol}"

    def __str__( self ):
        return self.display()


def convert( grand_total: Number, rate: Optional[Number], symbol: str = '' ) -> CryptoQuote:
    """Convert a fiat total into a cryptocurrency amount at rate (fiat per unit of crypto), rounded
    to 8 decimals.  A missing or non-positive rate yields an unpriced quote, never a division error.

    """
    rate			= to_number( rate )
    total			= to_number( grand_total )
    if rate > 0:
        amount			= round8( decimal( total ) / decimal( rate ))
    else:
        amount			= 0.0
    return CryptoQuote( symbol=( symbol or '' ).upper(), rate=rate, amount=amount )


def payment_uri( symbol: str, wallet_address: Optional[str], amount: Number ) -> Optional[str]:
    """Build a payment request URI for a wallet or QR code, eg.

        btc:bc1q...xyz?amount=0.0007

    No URI is meaningful without a destination address; returns None for a blank address.

    """
    address			= ( wallet_address or '' ).strip()
    if not address:
        return None
    return f"{( symbol or '' ).strip().lower()}:{address}?amount={format_amount( amount )}"


def payment_qr( uri: Optional[str], fill_color=None, back_color=None ):
    """Encode a payment URI as a QR code image (a qrcode PIL image wrapper; .get_image() yields the
    PIL.Image).  Returns None if there is no URI to encode.

    """
    if not uri:
        return None
    try:
        qrc			= qrcode.QRCode(
            version	= None,
            error_correction = qrcode.constants.ERROR_CORRECT_M,
            box_size	= 10,
            border	= 1
        )
        qrc.add_data( uri )
        qrc.make( fit=True )
        qr			= qrc.make_image(
            fill_color	= fill_color or QR_FILL,
            back_color	= back_color or QR_BACK,
        )
    except Exception as exc:
        raise RenderingError( f"Failed to encode QR for {uri!r}: {exc}" ) from exc
    if log.isEnabledFor( logging.DEBUG ):
        f			= io.StringIO()
        qrc.print_ascii( out=f )
        f.seek( 0 )
        for line in f:
            log.debug( line.rstrip() )
    return qr
