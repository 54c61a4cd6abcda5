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
from __future__          import annotations

from .version		import __version__			# noqa F401
from .errors		import (				# noqa F401
    InvoiceError, InputError, UpstreamUnavailable, RenderingError,
)
from .money		import (				# noqa F401
    round2, round8, format_amount, format_fiat, to_number, non_negative,
)
from .totals		import (				# noqa F401
    LineItem, InvoiceTotals, compute_totals, parse_items, request_totals,
)
from .prices		import (				# noqa F401
    ExchangeRate, PriceCache, resolve_rate, price_table, coin_id,
)
from .payment		import (				# noqa F401
    CryptoQuote, convert, payment_uri, payment_qr,
)
from .artifact		import (				# noqa F401
    Contact, Invoice, produce_invoice, invoice_pdf, write_invoice,
)
from .storage		import (				# noqa F401
    Profile, InvoiceStore,
)

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"
