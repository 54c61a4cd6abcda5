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
from __future__          import annotations

import click
import json
import logging
import sys

from ..artifact		import Invoice, invoice_summary
from ..money		import format_amount, format_fiat
from ..payment		import convert, payment_uri
from ..prices		import resolve_rate
from ..storage		import InvoiceStore
from ..totals		import request_totals
from ..util		import log_cfg, log_level

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
Provide basic CLI access to the crypto_invoice API.

Output generally defaults to JSON.  Use -v for more details, and --no-json to emit standard text output instead.
"""

log				= logging.getLogger( __package__ )


@click.group()
@click.option('-v', '--verbose', count=True)
@click.option('-q', '--quiet', count=True)
@click.option( '--json/--no-json', default=True, help="Output JSON (the default)")
def cli( verbose, quiet, json ):
    cli.verbosity		= verbose - quiet
    log_cfg['level']		= log_level( cli.verbosity )
    logging.basicConfig( **log_cfg )
    if verbose or quiet:
        logging.getLogger().setLevel( log_cfg['level'] )
    cli.json			= json
cli.verbosity			= 0  # noqa: E305
cli.json			= False


@click.command()
@click.argument( "request", default="-" )
def totals( request ):
    """Compute the totals of a JSON invoice request (file, or '-' for stdin)."""
    if request == '-':
        payload			= json.load( sys.stdin )
    else:
        with open( request, 'r', encoding='utf-8' ) as f:
            payload		= json.load( f )
    items,computed		= request_totals( payload )
    if cli.json:
        click.echo( json.dumps( computed.as_dict(), indent=4 ))
        return
    if cli.verbosity > 0:
        for item in items:
            click.echo( f"{item.description:40.40} {format_amount( item.quantity ):>6} x {format_fiat( item.unit_price ):>10} = {format_fiat( item.net() ):>10}" )
    for label,amount in (
        ( "Subtotal:",				computed.subtotal ),
        ( f"Tax ({computed.tax_percent:g}%):",	computed.tax_amount ),
        ( "Discount:",				computed.discount ),
        ( "Grand Total:",			computed.grand_total ),
    ):
        click.echo( f"{label:<14}{format_fiat( amount ):>12}" )


@click.command()
@click.option( "--crypto", default="BTC", help="The cryptocurrency symbol (default: BTC)" )
@click.option( "--fiat", default="USD", help="The fiat currency symbol (default: USD)" )
@click.option( "--price", default=None, type=float, help="A known exchange rate; skips the price sources" )
@click.option( "--timeout", default=None, type=float, help="Timeout of each price source query, in seconds" )
def price( crypto, fiat, price, timeout ):
    """Resolve the exchange rate of a cryptocurrency, in a fiat currency."""
    exchange			= resolve_rate( crypto, fiat, explicit_rate=price, timeout=timeout )
    if cli.json:
        click.echo( json.dumps( dict(
            base	= exchange.base,
            quote	= exchange.quote,
            rate	= exchange.rate,
            source	= exchange.source,
        ), indent=4 ))
    else:
        click.echo( f"{exchange}" if cli.verbosity > 0 else f"{exchange.rate}" )


@click.command()
@click.option( "--crypto", default="BTC", help="The cryptocurrency symbol (default: BTC)" )
@click.option( "--fiat", default="USD", help="The fiat currency symbol (default: USD)" )
@click.option( "--wallet", required=True, help="The wallet address to receive payment" )
@click.option( "--total", required=True, type=float, help="The fiat total to be paid" )
@click.option( "--price", default=None, type=float, help="A known exchange rate; skips the price sources" )
def uri( crypto, fiat, wallet, total, price ):
    """Convert a fiat total into a cryptocurrency amount, and its payment request URI."""
    exchange			= resolve_rate( crypto, fiat, explicit_rate=price )
    quote			= convert( total, exchange.rate, exchange.base )
    request			= payment_uri( quote.symbol, wallet, quote.amount ) if quote.priced else None
    if cli.json:
        click.echo( json.dumps( dict(
            symbol	= quote.symbol,
            rate	= quote.rate,
            source	= exchange.source,
            amount	= format_amount( quote.amount ) if quote.priced else None,
            uri		= request,
        ), indent=4 ))
    else:
        if cli.verbosity > 0:
            click.echo( f"{exchange}: {format_fiat( total )} {exchange.quote} == {quote}" )
        click.echo( request or quote.display() )


@click.command()
@click.option( "--store", default=None, help="The invoice store file (default: $CRYPTO_INVOICE_STORE, or ~/crypto-invoice.json)" )
def invoices( store ):
    """List the stored Invoice records, most recent first."""
    records			= InvoiceStore( store ).invoices()
    if cli.json:
        click.echo( json.dumps( records, indent=4 ))
        return
    for record in records:
        if cli.verbosity > 0:
            click.echo( invoice_summary( Invoice.from_request( record )))
        else:
            click.echo( f"{record.get( 'id' )}: {record.get( 'status' )}" )


@click.command()
@click.option( "--store", default=None, help="The invoice store file (default: $CRYPTO_INVOICE_STORE, or ~/crypto-invoice.json)" )
@click.argument( "number" )
def paid( store, number ):
    """Toggle the status of a stored Invoice between Unpaid and Paid."""
    status			= InvoiceStore( store ).toggle( number )
    if cli.json:
        click.echo( json.dumps( dict( id=number, status=status )))
    else:
        click.echo( f"{number}: {status}" )


cli.add_command( totals )
cli.add_command( price )
cli.add_command( uri )
cli.add_command( invoices )
cli.add_command( paid )
