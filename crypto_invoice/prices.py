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
import os

from dataclasses	import dataclass
from typing		import Callable, Dict, Optional, Sequence, Tuple, Union

import requests

from .defaults		import (
    INVOICE_CRYPTO, INVOICE_CURRENCY, COIN_IDS, COIN_SYMBOLS, STABLECOINS,
    PRICE_TIMEOUT, PRICE_CACHE_MAXAGE, PRICE_URL_ENV, MARKET_URL_ENV, MARKET_URL,
    PRICE_COINS, PRICE_VS,
    SOURCE_CALLER, SOURCE_CACHE, SOURCE_MARKET, SOURCE_PEGGED, SOURCE_UNPRICED,
)
from .errors		import UpstreamUnavailable
from .money		import to_number
from .util		import timer, commas

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

"""
Price Resolution.

Obtains the exchange rate of a cryptocurrency in terms of a fiat currency (eg. BTC/USD: 65432.10),
trying an ordered list of sources, cheapest first.  The first source yielding a positive rate wins;
each source is tried at most once, w/ its own timeout, and any failure simply falls through to the
next.  If every source fails, a USD-pegged stablecoin is assumed to trade at par (1.0), and any
other cryptocurrency is reported "unpriced" (0.0).  We never raise for an unpriced pair.

"""
log				= logging.getLogger( "prices" )


@dataclass( frozen=True )
class ExchangeRate:
    base: str					# crypto symbol, eg. "BTC"
    quote: str					# fiat symbol, eg. "USD"
    rate: float					# base/quote; <= 0 means "unpriced"
    source: str					# provenance tag, eg. "direct-market-api"

    @property
    def priced( self ) -> bool:
        return self.rate > 0

    def __str__( self ):
        return f"{self.base}/{self.quote} = {self.rate} ({self.source})"


class PriceCache:
    """A short-lived cache of resolved ExchangeRates, owned by the caller (eg. a page or CLI session)
    and passed to resolve_rate.  Entries older than maxage seconds are ignored, and purged.

    Only successful (priced) resolutions from network sources are cached.

    """
    def __init__( self, maxage: Optional[float] = None ):
        self.maxage		= PRICE_CACHE_MAXAGE if maxage is None else maxage
        self.reset()

    def reset( self ):
        """Flush all cached rates."""
        self._memo		= dict()		# { (base,quote): (<timestamp>, ExchangeRate), ... }

    def __len__( self ):
        return len( self._memo )

    def get( self, base: str, quote: str, now: Optional[float] = None ) -> Optional[ExchangeRate]:
        if now is None:
            now			= timer()
        last,exchange		= self._memo.get( (base, quote), (None, None) )
        if exchange is None:
            return None
        if self.maxage and now - last > self.maxage:
            log.info( f"Expiring {exchange} after {now - last:.1f}s" )
            self._memo.pop( (base, quote), None )
            return None
        return exchange

    def put( self, exchange: ExchangeRate, now: Optional[float] = None ) -> ExchangeRate:
        if exchange.priced:
            self._memo[exchange.base, exchange.quote] = ( timer() if now is None else now, exchange )
        return exchange


def coin_id( symbol: str ) -> str:
    """Market API id for a ticker symbol, eg. BTC --> bitcoin.  Unknown symbols are assumed to be
    the id (lower-case)."""
    return COIN_IDS.get( symbol.upper(), symbol.lower() )


def positive_rate( value, what ) -> float:
    rate			= to_number( value )
    if rate <= 0:
        raise UpstreamUnavailable( f"{what} yielded no positive rate: {value!r}" )
    return rate


def query_json( url, params, timeout=None ):
    """GET the url w/ params, returning the decoded JSON of a 200 OK response.  Raises
    UpstreamUnavailable on timeout, any other status, or non-JSON content."""
    try:
        response		= requests.get(
            url,
            params	= params,
            headers	= { 'Accept': 'application/json' },
            timeout	= timeout or PRICE_TIMEOUT,
        )
        if response.status_code != 200:
            raise UpstreamUnavailable( f"Failed to query {url} for {params}: {response.status_code} {response.text}" )
        return response.json()
    except UpstreamUnavailable:
        raise
    except Exception as exc:
        raise UpstreamUnavailable( f"Failed to query {url} for {params}: {exc}" ) from exc


def edge_price( crypto: str, fiat: str, timeout: Optional[float] = None, url: Optional[str] = None ) -> float:
    """Query our own (same-origin, shared-cache) price lookup endpoint, which returns { "btc": 65432.1,
    ... }.  The endpoint's URL is deployment specific; without one, this source is unavailable.

    """
    if url is None:
        url			= os.getenv( PRICE_URL_ENV )
    if not url:
        raise UpstreamUnavailable( f"No price endpoint configured in {PRICE_URL_ENV}" )
    prices			= query_json( url, dict( coins=coin_id( crypto ), vs=fiat.lower() ), timeout=timeout )
    if not hasattr( prices, 'get' ):
        raise UpstreamUnavailable( f"Price endpoint {url} yielded invalid response: {prices!r}" )
    return positive_rate(
        prices.get( crypto.lower(), prices.get( coin_id( crypto ))),
        f"Price endpoint {url} for {crypto}/{fiat}",
    )


def market_price( crypto: str, fiat: str, timeout: Optional[float] = None, url: Optional[str] = None ) -> float:
    """Query the public market-data API directly, eg. CoinGecko's

        /simple/price?ids=bitcoin&vs_currencies=usd --> { "bitcoin": { "usd": 65432.1 }}

    """
    if url is None:
        url			= os.getenv( MARKET_URL_ENV ) or MARKET_URL
    ident			= coin_id( crypto )
    prices			= query_json( url, dict( ids=ident, vs_currencies=fiat.lower() ), timeout=timeout )
    try:
        value			= prices[ident][fiat.lower()]
    except (KeyError, TypeError) as exc:
        raise UpstreamUnavailable( f"Market API {url} has no {crypto}/{fiat} price: {exc!r}" ) from exc
    return positive_rate( value, f"Market API {url} for {crypto}/{fiat}" )


PriceSource			= Callable[..., float]

PRICE_SOURCES: Tuple[Tuple[str, PriceSource], ...] = (
    (SOURCE_CACHE,	edge_price),
    (SOURCE_MARKET,	market_price),
)


def resolve_rate(
    crypto: Optional[str],
    fiat: Optional[str]		= None,
    explicit_rate		= None,			# A rate already known to the caller, if any
    cache: Optional[PriceCache]	= None,
    sources: Optional[Sequence[Tuple[str, PriceSource]]] = None,
    timeout: Optional[float]	= None,
) -> ExchangeRate:
    """Resolve the crypto/fiat exchange rate.  Tries, strictly in order:

    1) A caller-supplied explicit_rate > 0
    2) A fresh entry in the caller's PriceCache (retaining its original provenance)
    3) Each of the (tag, fetch) sources; by default our price endpoint, then the market API
    4) 1.0 for a USD-pegged stablecoin in USD, otherwise 0.0 ("unpriced")

    """
    crypto			= ( crypto or INVOICE_CRYPTO ).strip().upper()
    fiat			= ( fiat or INVOICE_CURRENCY ).strip().upper()

    explicit			= to_number( explicit_rate )
    if explicit > 0:
        return ExchangeRate( crypto, fiat, explicit, SOURCE_CALLER )

    if cache is not None and ( cached := cache.get( crypto, fiat )):
        log.info( f"Using cached {cached}" )
        return cached

    if sources is None:
        sources			= PRICE_SOURCES
    failures			= []
    for tag,fetch in sources:
        try:
            rate		= positive_rate( fetch( crypto, fiat, timeout=timeout ), tag )
        except Exception as exc:
            log.info( f"Price source {tag} failed for {crypto}/{fiat}: {exc}" )
            failures.append( tag )
            continue
        exchange		= ExchangeRate( crypto, fiat, rate, tag )
        log.info( f"Resolved {exchange}" )
        if cache is not None:
            cache.put( exchange )
        return exchange

    if crypto in STABLECOINS and fiat == 'USD':
        exchange		= ExchangeRate( crypto, fiat, 1.0, SOURCE_PEGGED )
    else:
        exchange		= ExchangeRate( crypto, fiat, 0.0, SOURCE_UNPRICED )
    log.warning( f"Price sources {commas( failures, final='and' ) or '(none)'} failed; using {exchange}" )
    return exchange


def price_table(
    coins: Optional[Union[str, Sequence[str]]] = None,
    vs: Optional[str]		= None,
    timeout: Optional[float]	= None,
    url: Optional[str]		= None,
) -> Dict[str, float]:
    """Return the current prices of the specified market coin ids (default: bitcoin and ethereum), in
    terms of the 'vs' currency (default: usd), keyed by lower-case ticker symbol.  Tether (usdt)
    is always included, at par if not requested.  Raises UpstreamUnavailable on failure.

        { "btc": 65432.1, "eth": 3456.78, "usdt": 1 }

    """
    if not coins:
        coins			= PRICE_COINS
    if isinstance( coins, str ):
        coins			= coins.split( ',' )
    coins			= [ c.strip().lower() for c in coins if c.strip() ]
    vs				= ( vs or PRICE_VS ).strip().lower()
    if url is None:
        url			= os.getenv( MARKET_URL_ENV ) or MARKET_URL

    prices			= query_json( url, dict( ids=','.join( coins ), vs_currencies=vs ), timeout=timeout )
    if not hasattr( prices, 'items' ):
        raise UpstreamUnavailable( f"Market API {url} yielded invalid response: {prices!r}" )
    table			= {
        COIN_SYMBOLS.get( ident, ident ).lower(): quotes.get( vs ) if hasattr( quotes, 'get' ) else None
        for ident,quotes in prices.items()
    }
    table.setdefault( 'usdt', 1 )
    log.info( f"Prices in {vs}: {commas( f'{s}: {p}' for s,p in table.items() )}" )
    return table
