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

import logging

from dataclasses	import dataclass, field, asdict
from datetime		import datetime, timezone
from pathlib		import Path
from typing		import Any, Dict, Iterator, List, Optional, Tuple, Union

import fpdf
import tabulate

from .defaults		import (
    INVOICE_CURRENCY, INVOICE_CRYPTO, INVOICE_LABEL, INVOICE_VENDOR, INVOICE_SENDER, INVOICE_CLIENT,
    INVOICE_FORMAT, INVOICE_ROWS, INVOICE_DESCRIPTION_MAX, INVOICE_STRFTIME,
    INVOICE_FOOTER, INVOICE_FOOTER_CRYPTO,
    STATUS_UNPAID, STATUS_PAID, FILENAME_FORMAT, SOURCE_CALLER,
)
from .errors		import InputError, RenderingError
from .layout		import layout_invoice, layout_pdf
from .money		import format_amount, format_fiat, to_number, non_negative
from .payment		import CryptoQuote, convert, payment_uri, payment_qr
from .prices		import ExchangeRate, PriceCache, resolve_rate
from .totals		import LineItem, InvoiceTotals, compute_totals, parse_items
from .util		import commas, is_mapping

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
Invoice artifacts:

    Invoice		-- States line items, taxes, discount and totals, and (optionally) the amount
                           payable in a cryptocurrency, w/ its payment URI and QR code

    Receipt		-- The Invoice, marked "PAID"

"""
log				= logging.getLogger( "artifact" )

# Custom tabulate format that provides "====" SEPARATING_LINE between line-items and totals
tabulate._table_formats["totalize"] = tabulate.TableFormat(
    lineabove		= tabulate.Line("", "-", "  ", ""),
    linebelowheader	= tabulate.Line("", "-", "  ", ""),
    linebetweenrows	= tabulate.Line("", "=", "  ", ""),
    linebelow		= tabulate.Line("", "-", "  ", ""),
    headerrow		= tabulate.DataRow("", "  ", ""),
    datarow		= tabulate.DataRow("", "  ", ""),
    padding		= 0,
    with_header_hide	= ["lineabove", "linebelow", "linebetweenrows"],
)
tabulate.multiline_formats["totalize"]	= "totalize"


def tabulate_nopad( *args, **kwds ):
    """Removes the default 2-character tabulate.MIN_PADDING from around column headers."""
    try:
        min_padding	= tabulate.MIN_PADDING
        tabulate.MIN_PADDING = 0
        return tabulate.tabulate( *args, **kwds )
    finally:
        tabulate.MIN_PADDING = min_padding


def latin1( text ):
    """The PDF core fonts only support Latin-1; replace anything else w/ '?'."""
    return str( text ).encode( 'latin-1', 'replace' ).decode( 'latin-1' )


@dataclass
class Contact:
    name: str					# Company or Individual eg. "Dominion Research and Development Corp."
    contact: Optional[str]	= None		# client/vendor authority eg. "Perry Kundert <perry@dominionrnd.com>"
    phone: Optional[str]	= None
    address: Optional[str]	= None		# multi-line mailing/delivery address

    @property
    def info( self ):
        if self.contact:
            yield self.contact
        if self.phone:
            yield self.phone
        if self.address:
            yield ', '.join( filter( None, self.address.split( '\n' )))

    def __str__( self ):
        return '\n'.join( [ self.name ] + list( self.info ))

    @classmethod
    def parse( cls, value: Any, default: Optional[str] = None ) -> Optional[Contact]:
        """A Contact from a Contact, a mapping of its fields, or multi-line text: the first line is
        the name, any remaining lines the address."""
        if isinstance( value, Contact ):
            return value
        if is_mapping( value ):
            return cls( **{ k: value[k] for k in ( 'name', 'contact', 'phone', 'address' ) if k in value } )
        lines			= [ ln.strip() for ln in str( value or '' ).split( '\n' ) if ln.strip() ]
        if not lines:
            return cls( name=default ) if default else None
        return cls( name=lines[0], address='\n'.join( lines[1:] ) or None )


def utcnow():
    return datetime.now( timezone.utc )


@dataclass
class Invoice:
    """An Invoice: its line items, tax and discount, and (optionally) the cryptocurrency and wallet
    address it is payable in.

    The totals, crypto quote and payment URI are always derived from these inputs; only the
    status (Unpaid/Paid) and the resolved exchange rate change after creation.  If a 'payable'
    fiat total is supplied, it is the amount converted into the cryptocurrency (instead of the
    computed grand total).

    """
    items: List[LineItem]
    sender: Optional[Contact]	= None
    client: Optional[Contact]	= None
    tax_percent: float		= 0
    discount: float		= 0
    currency: str		= INVOICE_CURRENCY
    crypto: Optional[str]	= None		# eg. "BTC"; None for a fiat-only Invoice
    wallet: Optional[str]	= None		# eg. "bc1q..."
    payable: Optional[float]	= None		# eg. a USD total agreed elsewhere
    exchange: Optional[ExchangeRate] = None
    status: str			= STATUS_UNPAID
    created: datetime		= field( default_factory=utcnow )
    number: Optional[str]	= None

    def __post_init__( self ):
        self.sender		= Contact.parse( self.sender, default=INVOICE_SENDER )
        self.client		= Contact.parse( self.client, default=INVOICE_CLIENT )
        if self.crypto:
            self.crypto		= self.crypto.strip().upper()
        if self.wallet is not None:
            self.wallet		= self.wallet.strip()
        if self.number is None:
            self.number		= f"INV-{int( self.created.timestamp() * 1000 )}"

    @property
    def totals( self ) -> InvoiceTotals:
        return compute_totals( self.items, tax_percent=self.tax_percent, discount=self.discount )

    @property
    def total( self ) -> float:
        """The fiat total payable; the supplied 'payable' amount, or the computed grand total."""
        if self.payable is not None:
            return self.payable
        return self.totals.grand_total

    @property
    def paid( self ) -> bool:
        return self.status == STATUS_PAID

    def toggle( self ) -> str:
        self.status		= STATUS_UNPAID if self.paid else STATUS_PAID
        return self.status

    def price(
        self,
        explicit_rate		= None,
        cache: Optional[PriceCache] = None,
        **kwds					# sources, timeout
    ) -> Optional[ExchangeRate]:
        """Resolve the exchange rate of the Invoice's cryptocurrency.  A rate previously resolved is
        retained (w/ its provenance), unless a new explicit_rate is supplied."""
        if not self.crypto:
            return None
        if explicit_rate is None and self.exchange is not None and self.exchange.priced:
            return self.exchange
        self.exchange		= resolve_rate(
            self.crypto, self.currency, explicit_rate=explicit_rate, cache=cache, **kwds
        )
        return self.exchange

    @property
    def quote( self ) -> Optional[CryptoQuote]:
        """The cryptocurrency amount due; unpriced until a positive exchange rate is resolved."""
        if not self.crypto:
            return None
        return convert( self.total, self.exchange.rate if self.exchange else 0, self.crypto )

    @property
    def uri( self ) -> Optional[str]:
        """The payment URI; absent w/o a wallet address, or w/o a priced quote (a 0 amount request
        would be misleading)."""
        quote			= self.quote
        if quote is None or not quote.priced:
            return None
        return payment_uri( self.crypto, self.wallet, quote.amount )

    @classmethod
    def from_request( cls, payload: Any, crypto: Optional[bool] = None ) -> Invoice:
        """Construct an Invoice from a JSON request or record, eg:

            { "items": [{ "description": "Widget", "qty": 2, "price": 10 }], "tax": 10,
              "discount": 1, "sender": "...", "client": "...",
              "crypto": "BTC", "wallet": "bc1...", "price": 30000, "usdTotal": 21 }

        If crypto is truthy, the Invoice is payable in a cryptocurrency (default: BTC); if None,
        only if 'crypto' is supplied.  Raises InputError if the line items are missing/invalid.

        """
        items			= parse_items( payload )
        if crypto is None:
            crypto		= bool( payload.get( 'crypto' ))
        symbol			= None
        exchange		= None
        currency		= str( payload.get( 'currency' ) or INVOICE_CURRENCY ).upper()
        payable			= None
        if crypto:
            symbol		= str( payload.get( 'crypto' ) or INVOICE_CRYPTO ).strip().upper()
            rate		= non_negative( payload.get( 'price' ))
            if rate > 0:
                exchange	= ExchangeRate( symbol, currency, rate, payload.get( 'source' ) or SOURCE_CALLER )
            for key in ( 'usdTotal', 'total' ):
                if payload.get( key ) is not None:
                    payable	= to_number( payload[key] )
                    break
        created			= utcnow()
        if stamp := payload.get( 'createdAt' ):
            try:
                created		= datetime.fromisoformat( str( stamp ).replace( 'Z', '+00:00' ))
            except ValueError as exc:
                raise InputError( f"Invalid createdAt {stamp!r}: {exc}" ) from exc
            if created.tzinfo is None:
                created		= created.replace( tzinfo=timezone.utc )
        return cls(
            items	= items,
            sender	= payload.get( 'sender' ),
            client	= payload.get( 'client' ),
            tax_percent	= non_negative( payload.get( 'tax' )),
            discount	= non_negative( payload.get( 'discount' )),
            currency	= currency,
            crypto	= symbol,
            wallet	= str( payload.get( 'wallet' ) or '' ) if crypto else None,
            payable	= payable,
            exchange	= exchange,
            status	= STATUS_PAID if payload.get( 'status' ) == STATUS_PAID else STATUS_UNPAID,
            created	= created,
            number	= str( payload['id'] ) if payload.get( 'id' ) else None,
        )

    def record( self ) -> Dict[str, Any]:
        """The JSON-compatible persisted record of this Invoice; from_request reconstructs it."""
        totals			= self.totals
        record			= dict(
            id		= self.number,
            createdAt	= self.created.isoformat(),
            status	= self.status,
            sender	= asdict( self.sender ) if self.sender else None,
            client	= asdict( self.client ) if self.client else None,
            items	= [
                dict( description=item.description, qty=item.quantity, price=item.unit_price )
                for item in self.items
            ],
            tax		= self.tax_percent,
            discount	= self.discount,
            currency	= self.currency,
            totals	= totals.as_dict(),
        )
        if self.crypto:
            quote		= self.quote
            record.update(
                crypto	= self.crypto,
                wallet	= self.wallet or '',
                price	= self.exchange.rate if self.exchange else 0,
                source	= self.exchange.source if self.exchange else None,
                quote	= dict( symbol=quote.symbol, rate=quote.rate, amount=quote.amount ),
                uri	= self.uri,
            )
            if self.payable is not None:
                record['usdTotal'] = self.payable
        return record

    def headers( self ) -> Tuple[str, ...]:
        return ( 'Description', 'Qty', 'Price', 'Total' )

    def pages( self, rows: Optional[int] = None ) -> Iterator[List[LineItem]]:
        """Yields the line items, paginated into chunks that leave room for the totals.  Always yields
        at least one (possibly empty) page."""
        if rows is None:
            rows		= INVOICE_ROWS
        per_page		= max( 1, rows - 12 )
        for i in range( 0, max( 1, len( self.items )), per_page ):
            yield self.items[i:i + per_page]

    def totals_rows( self ) -> List[List[str]]:
        totals			= self.totals
        rows			= [
            [ 'Subtotal',			'', '', format_fiat( totals.subtotal ) ],
            [ f"Tax ({totals.tax_percent:g}%)",	'', '', format_fiat( totals.tax_amount ) ],
        ]
        if totals.discount:
            rows.append( [ 'Discount',		'', '', format_fiat( totals.discount ) ] )
        rows.append( [ f"Total ({self.currency})",	'', '', format_fiat( totals.grand_total ) ] )
        if self.payable is not None and self.payable != totals.grand_total:
            rows.append( [ f"Payable ({self.currency})", '', '', format_fiat( self.payable ) ] )
        return rows

    def tables(
        self,
        tablefmt: Optional[str]	= None,
        rows: Optional[int]	= None,
        description_max: Optional[int] = None,
    ) -> Iterator[Tuple[List[LineItem], str]]:
        """Tabulate the line items of each page; the final page includes the totals."""
        if description_max is None:
            description_max	= INVOICE_DESCRIPTION_MAX
        pages			= list( self.pages( rows=rows ))
        for p,page in enumerate( pages ):
            table_rows		= [
                [
                    item.description,
                    format_amount( non_negative( item.quantity )),
                    format_fiat( non_negative( item.unit_price )),
                    format_fiat( item.net() ),
                ]
                for item in page
            ]
            if p + 1 == len( pages ):
                table_rows.append( tabulate.SEPARATING_LINE )
                table_rows.extend( self.totals_rows() )
            table		= tabulate_nopad(
                table_rows,
                headers		= self.headers(),
                colalign	= ( 'left', 'right', 'right', 'right' ),
                disable_numparse = True,
                tablefmt	= tablefmt or INVOICE_FORMAT,
                maxcolwidths	= [ description_max or None, None, None, None ],
            )
            yield page, table

    def payment_lines( self ) -> Tuple[str, str, str]:
        """The crypto payment label, amount due and details; the same amount and URI appear in the
        payment request's QR code."""
        quote			= self.quote
        exchange		= self.exchange
        label			= f"{self.crypto} Amount Due:"
        if exchange and exchange.priced:
            rate		= f"Rate used: {format_fiat( exchange.rate )} {self.currency} per {self.crypto} ({exchange.source})"
        else:
            rate		= "Rate used: N/A"
        if self.uri:
            pay			= f"Pay to: {self.uri}"
        elif self.wallet:
            pay			= f"Pay to: {self.wallet}"
        else:
            pay			= "Pay to: (no wallet address supplied)"
        details			= '\n'.join( [
            f"Total ({self.currency}): {format_fiat( self.total )}",
            rate,
            pay,
        ] )
        return label, quote.display(), details


def produce_invoice(
    invoice: Invoice,
    rows: Optional[int]		= None,
    paper_format: Any		= None,		# 'Letter', 'Legal', 'A4', (x,y) dimensions in mm.
    orientation: Optional[str]	= None,
    vendor: Optional[str]	= None,
) -> fpdf.FPDF:
    """Produces a PDF containing the supplied Invoice details, w/ a PAID watermark if paid, and
    the crypto payment details and QR code (if payable in a cryptocurrency).

    """
    if rows is None:
        rows			= INVOICE_ROWS
    orientation,pdf,inv_dim,offset = layout_pdf( paper_format=paper_format, orientation=orientation )
    inv				= layout_invoice( inv_dim=inv_dim, rows=rows )
    inv_tpl			= fpdf.FlexTemplate( pdf, list( inv.elements() ))

    label			= f"Crypto {INVOICE_LABEL}" if invoice.crypto else INVOICE_LABEL
    qr				= payment_qr( invoice.uri ) if invoice.crypto else None
    details			= list( invoice.tables( rows=rows ))
    log.info( f"Invoice {invoice.number}: {len( invoice.items )} items on {len( details )} pages" )
    for i,(page,tbl) in enumerate( details ):
        final			= i + 1 == len( details )
        pdf.add_page()

        inv_tpl['inv-vendor']	= latin1( vendor or INVOICE_VENDOR )
        inv_tpl['inv-label']	= latin1( label if len( details ) == 1 else f"{label} (page {i+1}/{len( details )})" )
        inv_tpl['inv-from-label'] = "From:"
        inv_tpl['inv-from']	= latin1( invoice.sender.name )
        inv_tpl['inv-from-info'] = latin1( '\n'.join( invoice.sender.info ))
        inv_tpl['inv-client-label'] = "Bill To:"
        inv_tpl['inv-client']	= latin1( invoice.client.name )
        inv_tpl['inv-client-info'] = latin1( '\n'.join( invoice.client.info ))
        inv_tpl['inv-details']	= latin1( "   ".join( [
            f"{INVOICE_LABEL} #: {invoice.number}",
            f"Date: {invoice.created.strftime( INVOICE_STRFTIME )}",
            f"Status: {invoice.status}",
        ] ))
        inv_tpl['inv-table']	= latin1( tbl )
        if final and invoice.crypto:
            crypto_label,crypto_amount,crypto_info = invoice.payment_lines()
            inv_tpl['inv-crypto-label'] = latin1( crypto_label )
            inv_tpl['inv-crypto-amount'] = latin1( crypto_amount )
            inv_tpl['inv-crypto-info'] = latin1( crypto_info )
            if qr is not None:
                inv_tpl['inv-qr'] = qr.get_image()
        inv_tpl['inv-footer']	= INVOICE_FOOTER_CRYPTO if invoice.crypto else INVOICE_FOOTER
        if invoice.paid:
            inv_tpl['inv-watermark'] = "- PAID -"

        inv_tpl.render( offsetx=offset.x, offsety=offset.y )
    return pdf


def invoice_pdf( invoice: Invoice, **kwds ) -> bytes:
    """Render the Invoice into PDF bytes.  Any failure raises RenderingError; no partial output."""
    try:
        pdf			= produce_invoice( invoice, **kwds )
        return bytes( pdf.output() )
    except RenderingError:
        raise
    except Exception as exc:
        log.warning( f"Failed to render Invoice {invoice.number}: {exc}" )
        raise RenderingError( f"Failed to render Invoice {invoice.number}: {exc}" ) from exc


def write_invoice(
    invoice: Invoice,
    filename: Optional[Union[str, Path]] = None,	# file name/format; default FILENAME_FORMAT
    directory: Optional[Union[str, Path]] = None,
    **kwds
) -> Path:
    """Render the Invoice and write its PDF to a file; returns the Path written."""
    name			= str( filename or FILENAME_FORMAT ).format(
        name	= invoice.number,
        date	= invoice.created.strftime( '%Y-%m-%d' ),
        crypto	= invoice.crypto or invoice.currency,
    )
    if not name.lower().endswith( '.pdf' ):
        name		       += '.pdf'
    path			= Path( directory or '.' ).resolve() / name
    data			= invoice_pdf( invoice, **kwds )
    log.warning( f"Writing {INVOICE_LABEL} {invoice.number!r} to: {path}" )
    path.write_bytes( data )
    return path


def invoice_summary( invoice: Invoice ) -> str:
    """A one-line summary, eg. for logging or listing stored Invoices."""
    totals			= invoice.totals
    parts			= [
        invoice.number,
        invoice.status,
        f"{format_fiat( totals.grand_total )} {invoice.currency}",
    ]
    if invoice.crypto:
        parts.append( invoice.quote.display() )
    if invoice.client:
        parts.append( invoice.client.name )
    return commas( parts )
