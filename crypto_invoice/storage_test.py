import json
import logging

import pytest

from .artifact		import Contact, Invoice
from .defaults		import STORE_ENV, STORE_INVOICES, STORE_PROFILE, STATUS_PAID, STATUS_UNPAID
from .errors		import InputError
from .storage		import InvoiceStore, Profile

log				= logging.getLogger( "storage_test" )


def widgets( number, **kwds ):
    return Invoice.from_request( dict(
        { "items": [ { "description": "Widget", "qty": 2, "price": 10 } ], "tax": 10, "discount": 1 },
        id=number, **kwds
    ))


def test_store_path( tmp_path, monkeypatch ):
    monkeypatch.setenv( STORE_ENV, str( tmp_path / "env.json" ))
    assert InvoiceStore().path == tmp_path / "env.json"
    assert InvoiceStore( tmp_path / "arg.json" ).path == tmp_path / "arg.json"


def test_store_invoices( tmp_path ):
    store			= InvoiceStore( tmp_path / "store.json" )
    assert store.invoices() == []

    store.save( widgets( "INV-1" ))
    store.save( widgets( "INV-2", crypto="BTC", wallet="bc1qxyz", price=30000 ))
    assert [ r['id'] for r in store.invoices() ] == [ "INV-2", "INV-1" ]

    # Saving an existing invoice replaces it, in place
    store.save( widgets( "INV-1", client="Awesome, Inc." ))
    records			= store.invoices()
    assert [ r['id'] for r in records ] == [ "INV-2", "INV-1" ]
    assert records[1]['client']['name'] == "Awesome, Inc."

    restored			= store.invoice( "INV-2" )
    assert restored.uri == "btc:bc1qxyz?amount=0.0007"
    assert restored.totals.grand_total == 21.0
    with pytest.raises( InputError ):
        store.invoice( "INV-3" )
    with pytest.raises( InputError ):
        store.save( { "status": STATUS_UNPAID } )

    # The store is a JSON object w/ namespaced keys
    data			= json.loads( ( tmp_path / "store.json" ).read_text() )
    assert set( data ) == { STORE_INVOICES }


def test_store_toggle( tmp_path ):
    store			= InvoiceStore( tmp_path / "store.json" )
    store.save( widgets( "INV-1" ))
    assert store.toggle( "INV-1" ) == STATUS_PAID
    assert InvoiceStore( tmp_path / "store.json" ).find( "INV-1" )['status'] == STATUS_PAID
    assert store.invoice( "INV-1" ).paid
    assert store.toggle( "INV-1" ) == STATUS_UNPAID
    with pytest.raises( InputError ):
        store.toggle( "INV-2" )


def test_store_last_write_wins( tmp_path ):
    one				= InvoiceStore( tmp_path / "store.json" )
    two				= InvoiceStore( tmp_path / "store.json" )
    one.save( widgets( "INV-1" ))
    records			= two.invoices()
    one.save( widgets( "INV-2" ))
    # A writer holding a stale copy of the records clobbers the other writer's update
    two.put( STORE_INVOICES, records )
    assert [ r['id'] for r in one.invoices() ] == [ "INV-1" ]


def test_store_corrupt( tmp_path ):
    path			= tmp_path / "store.json"
    path.write_text( "{ not json" )
    store			= InvoiceStore( path )
    assert store.invoices() == []
    store.save( widgets( "INV-1" ))
    assert len( store.invoices() ) == 1

    path.write_text( json.dumps( { STORE_INVOICES: "junk" } ))
    assert store.invoices() == []


def test_store_profile( tmp_path ):
    store			= InvoiceStore( tmp_path / "store.json" )
    assert store.profile() == Profile()
    store.save_profile( { "business": "Dominion R&D Corp.", "wallet": "bc1qxyz", "other": 1 } )
    assert store.profile() == Profile( business="Dominion R&D Corp.", wallet="bc1qxyz" )
    store.save( widgets( "INV-1" ))
    store.save_profile( Profile( business="Dominion" ))
    assert store.profile().wallet == ""
    assert len( store.invoices() ) == 1
    data			= json.loads( ( tmp_path / "store.json" ).read_text() )
    assert data[STORE_PROFILE] == { "business": "Dominion", "wallet": "" }


def test_store_contacts( tmp_path ):
    store			= InvoiceStore( tmp_path / "store.json" )
    client			= dict( name="Awesome, Inc.", contact="Jo <jo@awesome.com>", phone="555-1212", address="1 Way\nCalgary" )
    store.save( widgets( "INV-1", client=client, sender="Dominion R&D Corp.\n123 Main St." ))
    restored			= store.invoice( "INV-1" )
    assert restored.client == Contact( **client )
    assert restored.sender == Contact( name="Dominion R&D Corp.", address="123 Main St." )
