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

import json
import logging
import os

from dataclasses	import dataclass, asdict
from pathlib		import Path
from typing		import Any, Dict, List, Optional, Union

from .artifact		import Invoice
from .defaults		import STORE_ENV, STORE_FILE, STORE_INVOICES, STORE_PROFILE, STATUS_PAID, STATUS_UNPAID
from .errors		import InputError
from .util		import is_mapping

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
Invoice record storage.

A small JSON key-value file, w/ namespaced keys:

    {
        "cryptoinvoice:invoices": [ { "id": "INV-1700000000000", "status": "Unpaid", ... }, ... ],
        "cryptoinvoice:profile":  { "business": "...", "wallet": "bc1q..." }
    }

Every update reads the whole file, modifies one key, and writes the whole file back.  There is no
locking: concurrent writers are last-write-wins.

"""
log				= logging.getLogger( "storage" )


@dataclass
class Profile:
    business: str		= ''
    wallet: str			= ''


def store_path( path: Optional[Union[str, Path]] = None ) -> Path:
    """The store file; the supplied path, the CRYPTO_INVOICE_STORE environment variable, or
    ~/crypto-invoice.json."""
    if path is None:
        path			= os.getenv( STORE_ENV ) or Path.home() / STORE_FILE
    return Path( path )


class InvoiceStore:
    def __init__( self, path: Optional[Union[str, Path]] = None ):
        self.path		= store_path( path )

    def __str__( self ):
        return f"{self.__class__.__name__}( {self.path} )"

    def load( self ) -> Dict[str, Any]:
        """Read the whole store.  A missing or empty file is an empty store; an unreadable one is
        treated as empty (and will be replaced by the next update)."""
        try:
            text		= self.path.read_text( encoding='utf-8' )
        except FileNotFoundError:
            return {}
        if not text.strip():
            return {}
        try:
            data		= json.loads( text )
        except ValueError as exc:
            log.warning( f"Ignoring corrupt store {self.path}: {exc}" )
            return {}
        if not is_mapping( data ):
            log.warning( f"Ignoring invalid store {self.path}: not a JSON object" )
            return {}
        return data

    def get( self, key: str, default: Any = None ) -> Any:
        return self.load().get( key, default )

    def put( self, key: str, value: Any ) -> Any:
        data			= self.load()
        data[key]		= value
        self.path.parent.mkdir( parents=True, exist_ok=True )
        temp			= self.path.with_name( self.path.name + '.tmp' )
        temp.write_text( json.dumps( data, indent=4 ), encoding='utf-8' )
        temp.replace( self.path )
        log.info( f"Updated {key} in {self.path}" )
        return value

    def invoices( self ) -> List[Dict[str, Any]]:
        """All Invoice records, most recent first."""
        records			= self.get( STORE_INVOICES, [] )
        if not isinstance( records, list ):
            log.warning( f"Ignoring invalid {STORE_INVOICES} in {self.path}" )
            return []
        return [ r for r in records if is_mapping( r ) ]

    def find( self, number: str ) -> Optional[Dict[str, Any]]:
        return next( ( r for r in self.invoices() if r.get( 'id' ) == number ), None )

    def save( self, invoice: Union[Invoice, Dict[str, Any]] ) -> Dict[str, Any]:
        """Insert the Invoice's record (first), or replace the existing record w/ the same id."""
        record			= invoice.record() if isinstance( invoice, Invoice ) else dict( invoice )
        if not record.get( 'id' ):
            raise InputError( "Invalid invoice record: id required" )
        records			= self.invoices()
        for i,r in enumerate( records ):
            if r.get( 'id' ) == record['id']:
                records[i]	= record
                break
        else:
            records.insert( 0, record )
        self.put( STORE_INVOICES, records )
        return record

    def toggle( self, number: str ) -> str:
        """Flip the status of the Invoice w/ the given id between Unpaid and Paid; returns the new
        status.  Raises InputError if there is no such Invoice."""
        records			= self.invoices()
        for r in records:
            if r.get( 'id' ) == number:
                r['status']	= STATUS_UNPAID if r.get( 'status' ) == STATUS_PAID else STATUS_PAID
                self.put( STORE_INVOICES, records )
                log.warning( f"Invoice {number} is now {r['status']}" )
                return r['status']
        raise InputError( f"No invoice {number!r} in {self.path}" )

    def invoice( self, number: str ) -> Invoice:
        """Reconstruct the stored Invoice w/ the given id."""
        record			= self.find( number )
        if record is None:
            raise InputError( f"No invoice {number!r} in {self.path}" )
        return Invoice.from_request( record )

    def profile( self ) -> Profile:
        data			= self.get( STORE_PROFILE ) or {}
        if not is_mapping( data ):
            return Profile()
        return Profile(
            business	= str( data.get( 'business' ) or '' ),
            wallet	= str( data.get( 'wallet' ) or '' ),
        )

    def save_profile( self, profile: Union[Profile, Dict[str, Any]] ) -> Profile:
        if is_mapping( profile ):
            profile		= Profile( **{ k: str( profile.get( k ) or '' ) for k in ( 'business', 'wallet' ) } )
        self.put( STORE_PROFILE, asdict( profile ))
        return profile
