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


__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"


class InvoiceError( Exception ):
    """Base of all crypto_invoice failures."""
    pass


class InputError( InvoiceError, ValueError ):
    """Malformed or missing required fields at a boundary; rejected with an explanatory message."""
    pass


class UpstreamUnavailable( InvoiceError ):
    """A price source did not respond, or responded without a usable rate."""
    pass


class RenderingError( InvoiceError ):
    """The PDF or QR renderer failed; no partial output is returned."""
    pass
