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
import math

from decimal		import Decimal, ROUND_HALF_UP, InvalidOperation
from typing		import Any, Union

from .defaults		import FIAT_DECIMALS, CRYPTO_DECIMALS

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
Fixed-precision money arithmetic.

Fiat amounts are rounded to the cent (round2), cryptocurrency amounts to 8 decimals (round8).  All
rounding is half-up (ties away from zero, preserving sign), applied to the value as written in
decimal rather than to its binary floating-point approximation: 19.995 is really
19.99499999999999744... as a float, but it was entered (and is displayed) as 19.995, so 3 x 19.995
is 59.985 which rounds up to 59.99.

"""
log				= logging.getLogger( "money" )

Number				= Union[int, float, Decimal]


def decimal( value: Number ) -> Decimal:
    """Convert a number into the Decimal of its shortest round-trip representation.  For floats,
    this discards binary representation error (0.1 + 0.2 --> 0.30000000000000004, not
    0.3000000000000000444089209850062616169452667236328125).

    """
    if isinstance( value, Decimal ):
        return value
    if isinstance( value, int ):
        return Decimal( value )
    return Decimal( repr( float( value )))


def round_half_up( value: Number, places: int ) -> float:
    """Round a finite value half-up to the specified number of decimal places.  Non-finite values
    are returned unchanged (we never raise on bad numeric input)."""
    if isinstance( value, float ) and not math.isfinite( value ):
        return value
    try:
        rounded			= decimal( value ).quantize( Decimal( 1 ).scaleb( -places ), rounding=ROUND_HALF_UP )
    except InvalidOperation as exc:
        log.warning( f"Failed to round {value!r} to {places} places: {exc}" )
        return float( value )
    return float( rounded )


def round2( value: Number ) -> float:
    return round_half_up( value, FIAT_DECIMALS )


def round8( value: Number ) -> float:
    return round_half_up( value, CRYPTO_DECIMALS )


def format_amount( value: Number, places: int = CRYPTO_DECIMALS ) -> str:
    """Format an amount as a plain decimal literal (never scientific notation) of up to 'places'
    fractional digits, w/ trailing zeros stripped, eg. 0.0007, 100 or 0.

    """
    amount			= decimal( round_half_up( value, places ))
    text			= f"{amount.normalize():f}"
    if text in ( '-0', ):
        text			= '0'
    return text


def format_fiat( value: Number ) -> str:
    """Format a fiat amount with thousands separators to the cent, eg. 1,234.50"""
    return f"{decimal( round2( value )):,.2f}"


#
# Input sanitation.  Each boundary coerces its raw inputs once, w/ these; the computations
# themselves then assume well-formed, non-negative numbers.
#
def to_number( value: Any, default: float = 0 ) -> float:
    """Coerce a JSON-ish value (number, numeric string, None, ...) into a finite float; anything
    unparseable (or non-finite) yields the default."""
    if value is None or isinstance( value, bool ):
        return default
    try:
        number			= float( value.strip() if isinstance( value, str ) else value )
    except (TypeError, ValueError):
        return default
    if not math.isfinite( number ):
        return default
    return number


def non_negative( value: Any, default: float = 0 ) -> float:
    """Coerce a value into a non-negative number; negative values become 0."""
    number			= to_number( value, default )
    return number if number > 0 else 0
