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

import argparse
import json
import logging
import sys

from .artifact		import Invoice, invoice_pdf, write_invoice
from .defaults		import (   # noqa: F401
    PAPER, PAPER_FORMATS, INVOICE_ROWS, INVOICE_CRYPTO,
    FILENAME_FORMAT, FILENAME_KEYWORDS, STATUS_PAID,
)
from .prices		import PriceCache
from .storage		import InvoiceStore
from .util		import log_cfg, log_level

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

log				= logging.getLogger( __package__ )


def load_request( source ):
    """Load a JSON invoice request from a file name, or '-' (stdin)."""
    if source == '-':
        return json.load( sys.stdin )
    with open( source, 'r', encoding='utf-8' ) as f:
        return json.load( f )


def main( argv=None ):
    ap				= argparse.ArgumentParser(
        description = "Create an Invoice PDF (optionally payable in a cryptocurrency) from a JSON invoice request.",
        epilog = "eg. { \"items\": [{ \"description\": \"Widget\", \"qty\": 2, \"price\": 10 }], \"tax\": 10, \"discount\": 1 }" )
    ap.add_argument( '-v', '--verbose', action="count",
                     default=0,
                     help="Display logging information." )
    ap.add_argument( '-q', '--quiet', action="count",
                     default=0,
                     help="Reduce logging output." )
    ap.add_argument( '-o', '--output',
                     default=FILENAME_FORMAT,
                     help=f"Output PDF to file or '-' (stdout: use -q!); formatting w/ {', '.join( FILENAME_KEYWORDS )} allowed" )
    ap.add_argument( '-c', '--crypto',
                     default=None,
                     help=f"Make the Invoice payable in this cryptocurrency (eg. {INVOICE_CRYPTO}, ETH, USDC)" )
    ap.add_argument( '-w', '--wallet',
                     default=None,
                     help="The wallet address to receive the cryptocurrency payment" )
    ap.add_argument( '-p', '--price',
                     default=None,
                     help="The exchange rate of the cryptocurrency (default: query the price sources)" )
    ap.add_argument( '--usd-total',
                     default=None,
                     help="The fiat total to convert into the cryptocurrency (default: the invoice grand total)" )
    ap.add_argument( '--paid', action='store_true',
                     default=False,
                     help="Mark the Invoice as paid" )
    ap.add_argument( '--paper',
                     default=None,
                     help=f"Paper size; {', '.join( PAPER_FORMATS )} (default: {PAPER})" )
    ap.add_argument( '--orientation',
                     default=None,
                     help="Page orientation: portrait (default) or landscape" )
    ap.add_argument( '--rows',
                     default=None, type=int,
                     help=f"Text rows per invoice page (default: {INVOICE_ROWS})" )
    ap.add_argument( '--text', action='store_true',
                     default=None,
                     help="Also output the invoice tables to stdout" )
    ap.add_argument( '--store', action='store_true',
                     default=False,
                     help="Save the Invoice record to the invoice store" )
    ap.add_argument( 'request',
                     help="The JSON invoice request file; '-' reads it from stdin" )
    args			= ap.parse_args( argv )

    # Set up logging; also, handle the degenerate case where logging has *already* been set up (and
    # basicConfig is a NO-OP), by (also) setting the logging level
    log_cfg['level']		= log_level( args.verbose - args.quiet )
    logging.basicConfig( **log_cfg )
    if args.verbose:
        logging.getLogger().setLevel( log_cfg['level'] )

    log.debug( f"args: {args!r}" )
    payload			= load_request( args.request )
    for key,val in ( ('crypto', args.crypto), ('wallet', args.wallet), ('price', args.price), ('usdTotal', args.usd_total) ):
        if val is not None:
            payload[key]	= val
    if args.paid:
        payload['status']	= STATUS_PAID

    invoice			= Invoice.from_request( payload )
    if invoice.crypto:
        exchange		= invoice.price( cache=PriceCache() )
        log.info( f"Exchange rate: {exchange}" )

    if args.text:
        for _,tbl in invoice.tables( rows=args.rows ):
            print( tbl )
        if invoice.crypto:
            print( '\n'.join( invoice.payment_lines() ))

    kwds			= dict( rows=args.rows, paper_format=args.paper, orientation=args.orientation )
    if args.output == '-':
        sys.stdout.buffer.write( invoice_pdf( invoice, **kwds ))
        sys.stdout.flush()
    else:
        write_invoice( invoice, filename=args.output, **kwds )

    if args.store:
        store			= InvoiceStore()
        store.save( invoice )
        log.warning( f"Saved Invoice {invoice.number} to {store.path}" )
    return 0
