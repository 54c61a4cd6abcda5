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

from dataclasses	import dataclass, asdict
from decimal		import Decimal
from typing		import Any, Dict, List, Sequence, Tuple, Union

from .errors		import InputError
from .money		import decimal, round2, to_number, non_negative
from .util		import is_mapping, is_listlike

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

log				= logging.getLogger( "totals" )


# An invoice line-Item contains the details of a component of a transaction.  It is priced in the
# Invoice's fiat currency, with a number of units ('quantity'), and a 'unit_price' per unit.  Both
# are non-negative by contract; the boundary parsers coerce negative values to 0.
@dataclass
class LineItem:
    description: str				# "Widgets for The Thing"
    quantity: Union[int,float]	= 1		# 198, 1.5
    unit_price: Union[int,float] = 0		# 1.98, in the Invoice's fiat currency

    def net( self ) -> float:
        """The line total, rounded to the cent.  Negative quantity or price contribute nothing."""
        quantity		= non_negative( self.quantity )
        unit_price		= non_negative( self.unit_price )
        return round2( decimal( quantity ) * decimal( unit_price ))

    @property
    def line_total( self ) -> float:
        return self.net()


@dataclass( frozen=True )
class InvoiceTotals:
    """Derived totals of an Invoice's line items; always recomputed from its inputs, never a source of
    truth.  All values are 2-decimal fiat amounts, except tax_percent."""
    subtotal: float
    tax_percent: float
    tax_amount: float
    discount: float
    grand_total: float

    def as_dict( self ) -> Dict[str,float]:
        return asdict( self )


def line_total( item: Any ) -> float:
    """Compute the total of a LineItem, or of a mapping w/ quantity/price fields.  Anything else
    (or a mapping missing either field) is a zero-valued line; we never crash the render.

    """
    if isinstance( item, LineItem ):
        return item.net()
    if is_mapping( item ):
        quantity		= next( ( item[k] for k in ( 'quantity', 'qty' ) if k in item ), None )
        unit_price		= next( ( item[k] for k in ( 'unit_price', 'unitPrice', 'price' ) if k in item ), None )
        if quantity is not None and unit_price is not None:
            return LineItem( '', to_number( quantity ), to_number( unit_price )).net()
    log.info( f"Treating line item {item!r} as zero-valued" )
    return 0.0


def compute_totals(
    items: Sequence[Any],
    tax_percent: Any		= 0,
    discount: Any		= 0,
) -> InvoiceTotals:
    """Compute the subtotal, tax amount and grand total of the line items.

    Each line is rounded to the cent before summing, and the sum is exact (decimal), so the
    subtotal is independent of the order of the items.  Tax is a percentage of the subtotal.  The
    discount is subtracted last, and is not clamped; if it exceeds the subtotal plus taxes, the
    grand total is negative.  Negative tax percentages and discounts are coerced to 0.

    """
    if not is_listlike( items ):
        log.info( f"Treating non-sequence line items {type( items ).__name__} as empty" )
        items			= []
    tax_percent			= non_negative( tax_percent )
    discount			= round2( non_negative( discount ))

    subtotal			= round2( sum( ( decimal( line_total( item )) for item in items ), Decimal( 0 )))
    tax_amount			= round2( decimal( subtotal ) * decimal( tax_percent ) / 100 )
    grand_total			= round2( decimal( subtotal ) + decimal( tax_amount ) - decimal( discount ))
    return InvoiceTotals(
        subtotal	= subtotal,
        tax_percent	= tax_percent,
        tax_amount	= tax_amount,
        discount	= discount,
        grand_total	= grand_total,
    )


#
# Boundary parsing of invoice requests, eg. JSON:
#
#     { "items": [{ "description"|"name": "...", "qty"|"quantity": 2, "price": 10.00 }, ...],
#       "tax": 10, "discount": 1 }
#
def parse_item( entry: Any ) -> LineItem:
    """Parse one line item entry.  A missing quantity defaults to 1; a missing price to 0."""
    if not is_mapping( entry ):
        log.info( f"Treating line item entry {entry!r} as zero-valued" )
        return LineItem( description='', quantity=0, unit_price=0 )
    description			= entry.get( 'description' ) or entry.get( 'name' ) or ''
    quantity			= next( ( entry[k] for k in ( 'qty', 'quantity' ) if entry.get( k ) is not None ), None )
    unit_price			= next( ( entry[k] for k in ( 'price', 'unitPrice', 'unit_price' ) if entry.get( k ) is not None ), None )
    return LineItem(
        description	= str( description ),
        quantity	= non_negative( quantity, default=1 ),
        unit_price	= non_negative( unit_price ),
    )


def parse_items( payload: Any ) -> List[LineItem]:
    """Validate the structure of an invoice request, and parse its line items.  Raises InputError
    if the payload is not a mapping, or its 'items' is missing or not a list."""
    if not is_mapping( payload ) or not isinstance( payload.get( 'items' ), (list, tuple) ):
        raise InputError( "Invalid payload: items required" )
    return [ parse_item( entry ) for entry in payload['items'] ]


def parse_totals_request( payload: Any ) -> Tuple[List[LineItem], float, float]:
    """Returns the parsed line items, tax percentage and discount of an invoice request."""
    items			= parse_items( payload )
    tax_percent			= non_negative( payload.get( 'tax' ))
    discount			= non_negative( payload.get( 'discount' ))
    return items, tax_percent, discount


def request_totals( payload: Any ) -> Tuple[List[LineItem], InvoiceTotals]:
    items,tax_percent,discount	= parse_totals_request( payload )
    return items, compute_totals( items, tax_percent=tax_percent, discount=discount )
