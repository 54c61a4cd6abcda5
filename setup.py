import os

from setuptools import setup

# 
# All platforms
# 
HERE				= os.path.dirname( os.path.abspath( __file__ ))


def requirements( name ):
    # Remove whitespace, elide blank lines and comments
    return list(
        ''.join( r.split() )
        for r in open( os.path.join( HERE, name )).readlines()
        if r.strip() and not r.strip().startswith( '#' )
    )


install_requires		= requirements( "requirements.txt" )
tests_require			= requirements( "requirements-tests.txt" )
options_require			= [
        'serve',	# crypto-invoice[serve]:	Serve the HTTP invoice and price API
]
extras_require			= {
    option: requirements( f"requirements-{option}.txt" )
    for option in options_require
}
# Make crypto-invoice[all] install all extra (non-tests) requirements, excluding duplicates
extras_require['all']		= list( set( sum( extras_require.values(), [] )))

# Since setuptools is retiring tests_require, add it as another option (but not included in 'all')
extras_require['tests']		= tests_require

# Must work if setup.py is run in the source distribution context, or from
# within the packaged distribution directory.
__version__			= None
try:
    exec( open( 'crypto_invoice/version.py', 'r' ).read() )
except FileNotFoundError:
    exec( open( 'version.py', 'r' ).read() )

console_scripts			= [
    'crypto-invoice		= crypto_invoice.main:main',
    'crypto-invoice-cli	= crypto_invoice.cli:cli',
]

entry_points			= {
    'console_scripts': 		console_scripts,
}

package_dir			= {
    "crypto_invoice":		"./crypto_invoice",
    "crypto_invoice.cli":	"./crypto_invoice/cli",
}

long_description_content_type	= 'text/markdown'
long_description		= """\
Produce itemized invoices, optionally payable in a cryptocurrency.

Line items, taxes and discounts are totalled in fixed-precision decimal
arithmetic (rounded half-up to the cent), so the same invoice always
yields the same totals regardless of item order.  If the invoice is
payable in a cryptocurrency (eg. BTC, ETH, USDC), the fiat total is
converted at an exchange rate resolved from an ordered chain of price
sources (a caller-supplied rate, a short-lived cache, a same-origin
price endpoint, and the CoinGecko market API), and a payment request
URI (eg. `btc:bc1q...?amount=0.0007`) and QR code are produced.  The
PDF, the URI and the QR code always state the same amount.

Never verifies on-chain payment, and never signs transactions.

## Generating an Invoice PDF on the Command Line

    $ crypto-invoice -v --crypto BTC --wallet bc1q... request.json
    $ crypto-invoice-cli --no-json uri --wallet bc1q... --total 21 --price 30000
    btc:bc1q...?amount=0.0007

## Serving the HTTP API

    $ python3 -m pip install crypto-invoice[serve]
    $ uvicorn --factory crypto_invoice.server:app

    POST /api/createInvoice
    POST /api/createCryptoInvoice
    GET  /api/getCryptoPrice?coins=bitcoin,ethereum&vs=usd
"""

classifiers			= [
    "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
    "License :: Other/Proprietary License",
    "Programming Language :: Python :: 3",
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Topic :: Office/Business :: Financial :: Accounting",
]

setup(
    name			= "crypto-invoice",
    version			= __version__,
    install_requires		= install_requires,
    tests_require		= tests_require,
    extras_require		= extras_require,
    packages			= package_dir.keys(),
    package_dir			= package_dir,
    include_package_data	= True,
    zip_safe			= True,
    entry_points		= entry_points,
    author			= "Perry Kundert",
    author_email		= "perry@dominionrnd.com",
    description			= "Itemized invoice PDFs, optionally payable in cryptocurrency w/ payment URI and QR code",
    long_description		= long_description,
    long_description_content_type = long_description_content_type,
    license			= "Dual License; GPLv3 and Proprietary",
    keywords			= "invoice Bitcoin Ethereum cryptocurrency payment URI QR PDF",
    classifiers			= classifiers,
    python_requires		= ">=3.9",
)
