import logging

import pytest

from .artifact		import Contact, Invoice, produce_invoice, invoice_pdf, write_invoice, invoice_summary
from .defaults		import STATUS_PAID, STATUS_UNPAID, SOURCE_CALLER, SOURCE_UNPRICED
from .errors		import InputError, RenderingError
from .layout		import Coordinate, layout_invoice
from .prices		import ExchangeRate, PriceCache
from .totals		import LineItem

log				= logging.getLogger( "artifact_test" )

WIDGETS				= {
    "items":	[ { "description": "Widget", "qty": 2, "price": 10 } ],
    "tax":	10,
    "discount":	1,
    "sender":	"Dominion R&D Corp.\n123 Main St.\nCalgary, AB",
    "client":	"Awesome, Inc.",
}

CRYPTO_WIDGETS			= dict(
    WIDGETS,
    crypto	= "btc",
    wallet	= " bc1qxyz ",
    price	= 30000,
)


def failing( crypto, fiat, timeout=None ):
    raise ConnectionError( "Offline" )


def test_contact():
    contact			= Contact.parse( "Dominion R&D Corp.\n123 Main St.\n\nCalgary, AB" )
    assert contact.name == "Dominion R&D Corp."
    assert list( contact.info ) == [ "123 Main St., Calgary, AB" ]
    assert Contact.parse( "" ) is None
    assert Contact.parse( None, default="Client Name" ).name == "Client Name"
    full			= Contact.parse( dict( name="Perry", contact="perry@example.com", phone="555-1212" ))
    assert str( full ) == "Perry\nperry@example.com\n555-1212"


def test_invoice_from_request():
    invoice			= Invoice.from_request( WIDGETS )
    assert invoice.number.startswith( "INV-" )
    assert invoice.items == [ LineItem( "Widget", 2, 10 ) ]
    assert invoice.totals.grand_total == 21.0
    assert invoice.total == 21.0
    assert invoice.status == STATUS_UNPAID
    assert invoice.crypto is None
    assert invoice.quote is None
    assert invoice.uri is None
    assert invoice.sender.name == "Dominion R&D Corp."
    assert invoice.client.name == "Awesome, Inc."
    assert Invoice.from_request( { "items": [] } ).client.name == "Client Name"

    invoice			= Invoice.from_request( dict( WIDGETS, id="INV-42", createdAt="2024-01-02" ))
    assert invoice.number == "INV-42"
    assert invoice.created.year == 2024 and invoice.created.tzinfo is not None

    with pytest.raises( InputError ):
        Invoice.from_request( { "sender": "Nobody" } )
    with pytest.raises( InputError ):
        Invoice.from_request( dict( WIDGETS, createdAt="yesterday" ))


def test_invoice_crypto():
    invoice			= Invoice.from_request( CRYPTO_WIDGETS )
    assert invoice.crypto == "BTC"
    assert invoice.wallet == "bc1qxyz"
    assert invoice.exchange == ExchangeRate( "BTC", "USD", 30000, SOURCE_CALLER )
    assert invoice.quote.amount == 0.0007
    assert invoice.uri == "btc:bc1qxyz?amount=0.0007"

    # The explicitly supplied fiat total is converted, instead of the computed grand total
    override			= Invoice.from_request( dict( CRYPTO_WIDGETS, usdTotal=30 ))
    assert override.totals.grand_total == 21.0
    assert override.total == 30
    assert override.quote.amount == 0.001
    assert override.uri == "btc:bc1qxyz?amount=0.001"

    # A crypto invoice request defaults to BTC
    default			= Invoice.from_request( WIDGETS, crypto=True )
    assert default.crypto == "BTC"
    assert default.wallet == ""


def test_invoice_unpriced():
    invoice			= Invoice.from_request( dict( CRYPTO_WIDGETS, price=0 ))
    assert invoice.exchange is None
    assert not invoice.quote.priced
    assert invoice.uri is None

    exchange			= invoice.price( sources=[ ("fail", failing) ] )
    assert exchange.source == SOURCE_UNPRICED
    label,amount,details	= invoice.payment_lines()
    assert label == "BTC Amount Due:"
    assert amount == "price unavailable"
    assert "Rate used: N/A" in details
    assert "Pay to: bc1qxyz" in details

    # A stablecoin is assumed to be at par, if unpriced
    stable			= Invoice.from_request( dict( CRYPTO_WIDGETS, crypto="USDT", price=None ))
    stable.price( sources=[ ("fail", failing) ] )
    assert stable.quote.amount == 21.0
    assert stable.uri == "usdt:bc1qxyz?amount=21"


def test_invoice_price():
    invoice			= Invoice.from_request( dict( CRYPTO_WIDGETS, price=None ))
    cache			= PriceCache()
    exchange			= invoice.price( cache=cache, sources=[ ("test", lambda c, f, timeout=None: 42000) ] )
    assert exchange == ExchangeRate( "BTC", "USD", 42000, "test" )
    assert invoice.quote.amount == 0.0005
    # Once priced, the rate is retained w/o further queries
    assert invoice.price( sources=[ ("fail", failing) ] ) == exchange
    # ... unless a new rate is supplied
    assert invoice.price( explicit_rate=40000 ).source == SOURCE_CALLER
    assert invoice.quote.amount == 0.000525
    # Fiat invoices are never priced
    assert Invoice.from_request( WIDGETS ).price() is None


def test_invoice_status_and_record():
    invoice			= Invoice.from_request( CRYPTO_WIDGETS )
    assert invoice.toggle() == STATUS_PAID
    assert invoice.paid
    record			= invoice.record()
    assert record['id'] == invoice.number
    assert record['status'] == STATUS_PAID
    assert record['totals']['grand_total'] == 21.0
    assert record['quote']['amount'] == 0.0007
    assert record['uri'] == "btc:bc1qxyz?amount=0.0007"

    restored			= Invoice.from_request( record )
    assert restored.number == invoice.number
    assert restored.status == STATUS_PAID
    assert restored.created == invoice.created
    assert restored.totals == invoice.totals
    assert restored.uri == invoice.uri
    assert restored.toggle() == STATUS_UNPAID

    assert "Paid" in invoice_summary( invoice )
    assert "0.0007 BTC" in invoice_summary( invoice )


def test_invoice_tables():
    invoice			= Invoice.from_request( WIDGETS )
    (page,table),		= invoice.tables()
    log.info( f"\n{table}" )
    assert page == invoice.items
    assert "Widget" in table
    assert "Subtotal" in table
    assert "Tax (10%)" in table
    assert "Discount" in table
    assert "Total (USD)" in table
    assert "21.00" in table

    many			= Invoice.from_request( { "items": [ { "name": f"Item {i}", "price": i } for i in range( 30 ) ] } )
    pages			= list( many.tables( rows=20 ))
    assert len( pages ) == 4
    assert sum( len( p ) for p,_ in pages ) == 30
    assert "Subtotal" not in pages[0][1]
    assert "Subtotal" in pages[-1][1]


def test_invoice_pdf( tmp_path ):
    pdf				= invoice_pdf( Invoice.from_request( WIDGETS ))
    assert pdf.startswith( b"%PDF" )

    paid			= Invoice.from_request( dict( CRYPTO_WIDGETS, status=STATUS_PAID ))
    assert invoice_pdf( paid, paper_format="Letter" ).startswith( b"%PDF" )

    # Non-Latin-1 text is replaced, not fatal
    unicode			= Invoice.from_request( {
        "items": [ { "description": "Café ☕ — “special”", "qty": 1, "price": 4.5 } ],
        "client": "Zoë • Ltd.",
    } )
    assert invoice_pdf( unicode ).startswith( b"%PDF" )

    many			= Invoice.from_request( dict( CRYPTO_WIDGETS, items=[ { "name": f"Item {i}", "price": i } for i in range( 30 ) ] ))
    assert produce_invoice( many, rows=20 ).page_no() == 4

    path			= write_invoice( paid, directory=tmp_path )
    assert path.parent == tmp_path.resolve()
    assert path.name == f"{paid.number}-{paid.created.strftime( '%Y-%m-%d' )}.pdf"
    assert path.read_bytes().startswith( b"%PDF" )


def test_invoice_pdf_failure( monkeypatch ):
    from . import artifact

    def broken( invoice, **kwds ):
        raise OSError( "Disk on fire" )
    monkeypatch.setattr( artifact, "produce_invoice", broken )
    with pytest.raises( RenderingError ) as exc:
        invoice_pdf( Invoice.from_request( WIDGETS ))
    assert "Disk on fire" in str( exc.value )


def test_layout_invoice():
    inv				= layout_invoice( Coordinate( 7.5, 10 ))
    elements			= list( inv.elements() )
    names			= [ e['name'] for e in elements ]
    assert len( names ) == len( set( names ))
    assert 'invoice' not in names and 'inv-body' not in names	# plain Regions emit nothing
    for e in ( e for e in elements if not e['rotate'] ):
        assert 0 <= e['x1'] <= e['x2'] <= 7.5 * 25.4 + 1e-6, e
    qr				= next( e for e in elements if e['name'] == 'inv-qr' )
    assert qr['type'] == 'I'
    assert abs(( qr['x2'] - qr['x1'] ) - ( qr['y2'] - qr['y1'] )) < 1e-6
