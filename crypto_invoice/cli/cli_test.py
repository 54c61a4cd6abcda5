import json
import logging

from click.testing	import CliRunner

from .			import cli
from ..artifact		import Invoice
from ..storage		import InvoiceStore

log				= logging.getLogger( "cli_test" )

WIDGETS				= {
    "items":	[ { "description": "Widget", "qty": 2, "price": 10 } ],
    "tax":	10,
    "discount":	1,
}


def test_cli_totals():
    runner			= CliRunner()
    result			= runner.invoke( cli, [ 'totals' ], input=json.dumps( WIDGETS ))
    assert result.exit_code == 0, result.output
    assert json.loads( result.output ) == dict(
        subtotal=20.0, tax_percent=10.0, tax_amount=2.0, discount=1.0, grand_total=21.0
    )

    result			= runner.invoke( cli, [ '--no-json', 'totals', '-' ], input=json.dumps( WIDGETS ))
    assert result.exit_code == 0, result.output
    assert "Tax (10%):" in result.output
    assert "Grand Total:" in result.output and "21.00" in result.output

    result			= runner.invoke( cli, [ 'totals' ], input=json.dumps( { "tax": 10 } ))
    assert result.exit_code != 0


def test_cli_price_and_uri():
    runner			= CliRunner()
    result			= runner.invoke( cli, [ 'price', '--crypto', 'eth', '--price', '2000' ] )
    assert result.exit_code == 0, result.output
    assert json.loads( result.output ) == dict( base="ETH", quote="USD", rate=2000.0, source="caller-supplied" )

    result			= runner.invoke( cli, [ '--no-json', 'uri', '--wallet', 'bc1qxyz', '--total', '21', '--price', '30000' ] )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "btc:bc1qxyz?amount=0.0007"

    result			= runner.invoke( cli, [ 'uri', '--wallet', 'bc1qxyz', '--total', '21', '--price', '30000' ] )
    assert json.loads( result.output )['amount'] == "0.0007"


def test_cli_invoices( tmp_path ):
    path			= tmp_path / "store.json"
    InvoiceStore( path ).save( Invoice.from_request( dict( WIDGETS, id="INV-1" )))

    runner			= CliRunner()
    result			= runner.invoke( cli, [ 'invoices', '--store', str( path ) ] )
    assert result.exit_code == 0, result.output
    assert [ r['id'] for r in json.loads( result.output ) ] == [ "INV-1" ]

    result			= runner.invoke( cli, [ '--no-json', 'paid', '--store', str( path ), 'INV-1' ] )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "INV-1: Paid"

    result			= runner.invoke( cli, [ '--no-json', 'invoices', '--store', str( path ) ] )
    assert result.output.strip() == "INV-1: Paid"

    result			= runner.invoke( cli, [ 'paid', '--store', str( path ), 'INV-2' ] )
    assert result.exit_code != 0
