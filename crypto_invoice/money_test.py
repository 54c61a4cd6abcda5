import logging
import math

import pytest

from .money		import round2, round8, format_amount, format_fiat, to_number, non_negative, decimal

log				= logging.getLogger( "money_test" )


def test_round_half_up():
    # As binary floats, these are all slightly *below* the tie; rounded as written, they round up
    assert round2( 1.005 ) == 1.01
    assert round2( 59.985 ) == 59.99
    assert round2( 0.125 ) == 0.13
    assert round8( 0.123456785 ) == 0.12345679

    # Ties round away from zero, preserving sign
    assert round2( -1.005 ) == -1.01
    assert round2( -0.125 ) == -0.13
    assert round2( 2.675 ) == 2.68

    # Not banker's rounding
    assert round2( 0.245 ) == 0.25
    assert round2( 0.255 ) == 0.26

    # Idempotent
    for x in ( 1.005, 59.985, 21/30000, -3.14159, 1e9 + 0.005 ):
        assert round2( round2( x )) == round2( x )
        assert round8( round8( x )) == round8( x )


def test_round_non_finite():
    assert math.isnan( round2( float( 'nan' )))
    assert round2( float( 'inf' )) == float( 'inf' )


def test_decimal():
    assert decimal( 0.1 ) + decimal( 0.2 ) == decimal( 0.3 )
    assert str( decimal( 19.995 )) == "19.995"
    assert decimal( 3 ) * decimal( 19.995 ) == decimal( 59.985 )


def test_format_amount():
    assert format_amount( 0.0007 ) == "0.0007"
    assert format_amount( 100 ) == "100"
    assert format_amount( 0 ) == "0"
    assert format_amount( -0.0 ) == "0"
    assert format_amount( 1e-8 ) == "0.00000001"
    assert format_amount( 1.23e-7 ) == "0.00000012"
    assert format_amount( 12345678.9 ) == "12345678.9"
    assert format_amount( 2.5, places=0 ) == "3"
    assert 'e' not in format_amount( 5e-6 ).lower()


def test_format_fiat():
    assert format_fiat( 1234.5 ) == "1,234.50"
    assert format_fiat( 21 ) == "21.00"
    assert format_fiat( 0.005 ) == "0.01"
    assert format_fiat( -5 ) == "-5.00"


def test_to_number():
    assert to_number( "12.5" ) == 12.5
    assert to_number( " 3 " ) == 3
    assert to_number( 7 ) == 7
    assert to_number( "abc" ) == 0
    assert to_number( None ) == 0
    assert to_number( None, default=1 ) == 1
    assert to_number( "", default=2 ) == 2
    assert to_number( True ) == 0
    assert to_number( [1] ) == 0
    assert to_number( float( 'nan' )) == 0
    assert to_number( "inf", default=5 ) == 5


@pytest.mark.parametrize( "value, expected", [
    ( -3,	0 ),
    ( "-0.01",	0 ),
    ( 0,	0 ),
    ( "2.5",	2.5 ),
    ( None,	0 ),
] )
def test_non_negative( value, expected ):
    assert non_negative( value ) == expected
