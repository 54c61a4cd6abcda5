import logging

from .payment		import CryptoQuote, convert, payment_uri, payment_qr

log				= logging.getLogger( "payment_test" )


def test_convert():
    quote			= convert( 21, 30000, "btc" )
    assert quote == CryptoQuote( symbol="BTC", rate=30000, amount=0.0007 )
    assert quote.priced
    assert str( quote ) == "0.0007 BTC"

    # Rounded half-up to 8 decimals
    assert convert( 100, 3, "ETH" ).amount == 33.33333333
    assert convert( 200, 3, "ETH" ).amount == 66.66666667


def test_convert_unpriced():
    for rate in ( 0, -1, None, "junk" ):
        quote			= convert( 21, rate, "BTC" )
        assert not quote.priced
        assert quote.amount == 0
        assert quote.display() == "price unavailable"
        assert "0" not in str( quote )


def test_payment_uri():
    assert payment_uri( "BTC", "  bc1qxyz  ", 0.0007 ) == "btc:bc1qxyz?amount=0.0007"
    assert payment_uri( "eth", "0xABC", 1e-8 ) == "eth:0xABC?amount=0.00000001"
    assert payment_uri( "USDC", "0xABC", 100 ) == "usdc:0xABC?amount=100"
    assert payment_uri( "BTC", "", 1 ) is None
    assert payment_uri( "BTC", "   ", 1 ) is None
    assert payment_uri( "BTC", None, 1 ) is None

    # The URI amount is exactly the displayed amount
    quote			= convert( 21, 30000, "BTC" )
    uri				= payment_uri( quote.symbol, "bc1qxyz", quote.amount )
    assert uri.split( "amount=" )[1] == str( quote ).split()[0]


def test_payment_qr():
    assert payment_qr( None ) is None
    assert payment_qr( "" ) is None
    qr				= payment_qr( "btc:bc1qxyz?amount=0.0007" )
    image			= qr.get_image()
    width,height		= image.size
    assert width == height and width > 0
