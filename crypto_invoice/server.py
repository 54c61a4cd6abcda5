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

from typing		import Any, Dict, Optional

from fastapi		import FastAPI, Request
from fastapi.responses	import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException

from .artifact		import Invoice, invoice_pdf
from .defaults		import PRICE_CACHE_CONTROL
from .errors		import InputError
from .prices		import PriceCache, price_table
from .version		import __version__

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
HTTP API.

    POST /api/createInvoice		-- JSON invoice --> invoice.pdf
    POST /api/createCryptoInvoice	-- JSON invoice w/ crypto, wallet, price?, usdTotal? --> crypto-invoice.pdf
    GET  /api/getCryptoPrice		-- ?coins=bitcoin,ethereum&vs=usd --> { "btc": ..., "eth": ..., "usdt": ... }

Errors are reported as JSON { "error": "..." }: 405 for the wrong method, 400 for an invalid
payload, and 500 for any other failure.

"""
log				= logging.getLogger( "server" )

METHODS				= [ "GET", "POST", "PUT", "PATCH", "DELETE" ]


def error( status: int, message: str ) -> JSONResponse:
    return JSONResponse( status_code=status, content={ "error": message } )


async def request_payload( request: Request ) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise InputError( f"Invalid JSON payload: {exc}" ) from exc


def render_invoice( payload: Any, crypto: bool, cache: Optional[PriceCache] ) -> bytes:
    invoice			= Invoice.from_request( payload, crypto=crypto )
    if crypto:
        invoice.price( cache=cache )
    log.info( f"Rendering {'crypto ' if crypto else ''}invoice {invoice.number}" )
    return invoice_pdf( invoice )


def app( cache: Optional[PriceCache] = None ) -> FastAPI:
    """Create the HTTP API.  Crypto invoice exchange rates are resolved through the supplied (or a
    new) PriceCache, owned by this app."""
    if cache is None:
        cache			= PriceCache()

    api				= FastAPI( title="Crypto Invoice", version=__version__ )

    @api.exception_handler( HTTPException )
    async def http_error( request: Request, exc: HTTPException ) -> JSONResponse:
        # Eg. 405 for HEAD/OPTIONS, or 404; always reported as { "error": ... }
        response		= error( exc.status_code, str( exc.detail ))
        if exc.headers:
            response.headers.update( exc.headers )
        return response

    async def create( request: Request, crypto: bool, filename: str ) -> Response:
        if request.method != "POST":
            return error( 405, "Method not allowed; use POST" )
        try:
            payload		= await request_payload( request )
            pdf			= await run_in_threadpool( render_invoice, payload, crypto, cache )
        except InputError as exc:
            log.warning( f"{request.url.path}: {exc}" )
            return error( 400, str( exc ))
        except Exception as exc:
            log.exception( f"{request.url.path} failed" )
            return error( 500, str( exc ) or "pdf error" )
        return Response(
            content	= pdf,
            media_type	= "application/pdf",
            headers	= {
                "Content-Disposition":	f"attachment; filename={filename}",
                "Cache-Control":	"no-store",
            },
        )

    @api.api_route( "/api/createInvoice", methods=METHODS )
    async def create_invoice( request: Request ) -> Response:
        return await create( request, crypto=False, filename="invoice.pdf" )

    @api.api_route( "/api/createCryptoInvoice", methods=METHODS )
    async def create_crypto_invoice( request: Request ) -> Response:
        return await create( request, crypto=True, filename="crypto-invoice.pdf" )

    @api.get( "/api/getCryptoPrice" )
    async def get_crypto_price( coins: Optional[str] = None, vs: Optional[str] = None ) -> Response:
        try:
            table: Dict[str, Any] = await run_in_threadpool( price_table, coins, vs )
        except Exception as exc:
            log.warning( f"/api/getCryptoPrice failed: {exc}" )
            return error( 500, str( exc ) or "price error" )
        return JSONResponse(
            content	= table,
            headers	= { "Cache-Control": PRICE_CACHE_CONTROL },
        )

    return api
