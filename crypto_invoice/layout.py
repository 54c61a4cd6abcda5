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
import math

from collections	import namedtuple
from typing		import Any, Optional, Tuple

import fpdf

from .defaults		import (
    FONTS, MM_IN, PT_IN, COLOR, PAPER, PAPER_FORMATS, ORIENTATION, PAGE_MARGIN, INVOICE_ROWS,
)

__author__                      = "Perry Kundert"
__email__                       = "perry@dominionrnd.com"
__copyright__                   = "Copyright (c) 2022 Dominion Research & Development Corp."
__license__                     = "Dual License: GPLv3 (or later) and Commercial (see LICENSE)"

log				= logging.getLogger( "layout" )


Coordinate			= namedtuple( 'Coordinate', ('x', 'y') )


class Region:
    """Takes authority for a portion of another Region, and places things in it, relative to its
    upper-left and lower-right corners.

    Attempts to create a sane priority hierarchy, because fpdf2's FlexTemplate sorts based on it.
    If a specific priority is provided, it will be used.  However, if no priority is given, 0 will
    be automatically assigned by FlexTemplate.

    All Region dimensions are in inches; elements are emitted in mm.

    """
    def __init__( self, name, x1=None, y1=None, x2=None, y2=None, rotate=None, priority=None ):
        self.name		= name
        self.x1			= x1		# could represent positions, offsets or ratios
        self.y1			= y1
        self.x2			= x2
        self.y2			= y2
        self.rotate		= rotate
        self.priority		= priority
        self.regions		= []

    @property
    def h( self ):
        return self.y2 - self.y1

    @property
    def w( self ):
        return self.x2 - self.x1

    def element( self ):
        "Converts to mm.  Optionally returns a specified priority."
        d			= dict(
            name	= self.name,
            x1		= self.x1 * MM_IN,
            y1		= self.y1 * MM_IN,
            x2		= self.x2 * MM_IN,
            y2		= self.y2 * MM_IN,
            rotate	= self.rotate or 0.0
        )
        if self.priority:
            d['priority']	= self.priority
        return d

    def add_region_proportional( self, region ):
        region.x1		= self.x1 + self.w * ( 0 if region.x1 is None else region.x1 )
        region.y1		= self.y1 + self.h * ( 0 if region.y1 is None else region.y1 )
        region.x2		= self.x1 + self.w * ( 1 if region.x2 is None else region.x2 )
        region.y2		= self.y1 + self.h * ( 1 if region.y2 is None else region.y2 )
        self.regions.append( region )
        return region

    def square( self, justify=None ):
        """Make a region square, justifying it L/C/R, and/or T/M/B; default is Center/Middle"""
        dims			= min( self.w, self.h )
        justify			= ( justify or '' ).upper()
        if 'L' in justify:
            self.x2		= self.x1 + dims
        elif 'R' in justify:
            self.x1		= self.x2 - dims
        else:
            self.x1, self.x2	= self.x1 + ( self.w - dims ) / 2, self.x2 - ( self.w - dims ) / 2
        if 'T' in justify:
            self.y2		= self.y1 + dims
        elif 'B' in justify:
            self.y1		= self.y2 - dims
        else:
            self.y1, self.y2	= self.y1 + ( self.h - dims ) / 2, self.y2 - ( self.h - dims ) / 2
        return self

    def elements( self ):
        """Yield a sequence of { 'name': "...", 'x1': #,  ... }."""
        if self.__class__ != Region:
            yield self.element()
        for r in self.regions:
            for d in r.elements():
                yield d


class Text( Region ):
    SIZE_RATIO			= 3/4

    def __init__( self, *args, font=None, text=None, size=None, size_ratio=None, align=None, multiline=None,
                  foreground=None, bold=None, italic=None,
                  **kwds ):
        self.font		= font		# "mono"
        self.text		= text
        self.multiline		= multiline
        self.size		= size
        self.size_ratio		= size_ratio or self.SIZE_RATIO
        self.align		= align
        self.foreground		= foreground
        self.bold		= bold
        self.italic		= italic
        super().__init__( *args, **kwds )

    def element( self ):
        d			= super().element()
        d['type']		= 'T'
        d['font']		= FONTS.get( self.font ) or self.font or FONTS.get( 'sans' )
        line_height		= self.h * PT_IN  # Postscript point == 1/72 inch
        d['size']		= self.size or ( line_height * self.size_ratio )
        if self.text is not None:
            d['text']		= self.text
        if self.bold:
            d['bold']		= True
        if self.italic:
            d['italic']		= True
        if self.align is not None:
            d['align']		= self.align
        if self.multiline is not None:
            d['multiline']	= bool( self.multiline )
        if self.foreground is not None:
            d['foreground']	= self.foreground
        return d


class Image( Region ):
    def element( self ):
        d			= super().element()
        d['type']		= 'I'
        return d


class Box( Region ):
    def __init__( self, *args, foreground=None, background=None, **kwds ):
        self.foreground		= foreground
        self.background		= background
        super().__init__( *args, **kwds )

    def element( self ):
        d			= super().element()
        d['type']		= 'B'
        if self.foreground is not None:
            d['foreground']	= self.foreground
        if self.background is not None:
            d['background']	= self.background
        return d


def layout_invoice(
    inv_dim: Coordinate,			# Printable invoice dimensions, in inches (net page margins).
    rows: Optional[int]		= None,		# Text rows in the body of the invoice
):
    """Layout an Invoice, in portrait format, in the printable area of a page.  Each page of an
    Invoice uses the same layout; the totals and crypto payment details only get text on the final
    page.

        +----------------------------------------------+
        |Vendor                           Crypto Invoice|
        |From:                  Bill To:               |
        |(sender)               (client)               |
        |Invoice #: ...  Date: ...  Status: ...        |
        |Description               Qty   Price   Total |
        |...                                           |
        |========                                      |
        |                           Subtotal    ##.##  |
        |                           Total (USD) ##.##  |
        |                                              |
        |BTC Amount Due:                      +------+ |
        |#.######## BTC                       |  QR  | |
        |Rate used: ... / Pay to: btc:...     +------+ |
        |              (footer note)                   |
        +----------------------------------------------+

    Rotates the watermark (eg. "PAID") so its angle is from the lower-left to the upper-right.

    """
    if rows is None:
        rows			= INVOICE_ROWS

    inv				= Region( 'invoice', 0, 0, inv_dim.x, inv_dim.y )

    a				= inv.h
    b				= inv.w
    c				= math.sqrt( a * a + b * b )
    β				= math.atan( b / a )
    rotate			= 90 - math.degrees( β )

    # Header: Vendor name on left, Invoice/Crypto Invoice label on right
    inv.add_region_proportional(
        Text( 'inv-vendor', x2=2/3, y2=4/100, foreground=COLOR['vendor'], bold=True, align='L' )
    )
    inv.add_region_proportional(
        Text( 'inv-label', x1=2/3, y1=1/100, y2=4/100, foreground=COLOR['label'], align='R' )
    )

    # Parties: From (sender) on left, Bill To (client) on right
    for side,(x1,x2) in ( ('from', (0, 1/2)), ('client', (1/2, 1)) ):
        inv.add_region_proportional(
            Text( f'inv-{side}-label', x1=x1, x2=x2, y1=5/100, y2=6.5/100, foreground=COLOR['caption'] )
        )
        inv.add_region_proportional(
            Text( f'inv-{side}', x1=x1, x2=x2, y1=6.5/100, y2=8.5/100, foreground=COLOR['text'], bold=True )
        )
        inv.add_region_proportional(
            Text( f'inv-{side}-info', x1=x1, x2=x2, y1=8.5/100, y2=10/100, foreground=COLOR['caption'], multiline=True )
        )

    # A thin rule between the parties and the invoice details
    inv.add_region_proportional(
        Box( 'inv-rule', y1=11.5/100, y2=11.6/100, foreground=COLOR['caption'], background=COLOR['caption'] )
    )

    inv.add_region_proportional(
        Text( 'inv-details', y1=13/100, y2=15/100, font='mono', foreground=COLOR['text'] )
    )

    # inv-table: Line items and totals; the region is one text row high, and the text flows down
    inv_body			= inv.add_region_proportional(
        Region( 'inv-body', y1=17/100, y2=70/100 )
    )
    inv_body.add_region_proportional(
        Text( 'inv-table', y2=1/rows, font='mono', multiline=True, foreground=COLOR['text'] )
    )

    # inv-crypto: Cryptocurrency payment details, and the payment URI's QR code
    inv_crypto			= inv.add_region_proportional(
        Region( 'inv-crypto', y1=72/100, y2=93/100 )
    )
    inv_crypto.add_region_proportional(
        Text( 'inv-crypto-label', x2=3/4, y2=1/6, foreground=COLOR['total'], bold=True )
    )
    inv_crypto.add_region_proportional(
        Text( 'inv-crypto-amount', x2=3/4, y1=1/6, y2=2/6, foreground=COLOR['panel'], bold=True )
    )
    inv_crypto.add_region_proportional(
        Text( 'inv-crypto-info', x2=3/4, y1=2/6, y2=2/6 + 1/10, foreground=COLOR['caption'], multiline=True )
    )
    inv_crypto.add_region_proportional(
        Image( 'inv-qr', x1=3/4 )
    ).square( justify='R' )

    inv.add_region_proportional(
        Text( 'inv-footer', y1=95/100, y2=97/100, foreground=COLOR['caption'], align='C', multiline=True )
    )

    # Finally, in front of all other elements, the watermark
    inv.add_region_proportional(
        Text(
            'inv-watermark',
            x1		= c/b * 20/100,
            y1		= +4/32,
            x2		= c/b * 80/100,
            y2		= +10/32,
            foreground	= COLOR['watermark'],
            rotate	= -rotate,
            bold	= True,
            italic	= True,
            align	= 'C',
            priority	= 1,
        )
    )

    return inv


def layout_pdf(
    paper_format: Any		= None,		# 'Letter', 'Legal', 'A4', (x,y) dimensions in mm.
    orientation: Optional[str]	= None,
    page_margin: Optional[float] = None,	# inches
) -> Tuple[str, fpdf.FPDF, Coordinate, Coordinate]:
    """Create the FPDF for an invoice.  Returns the orientation, the FPDF, the printable invoice
    dimensions in inches, and the (x,y) offset of the invoice on each page, in mm.

    """
    if paper_format is None:
        paper_format		= PAPER
    paper_format		= PAPER_FORMATS.get( paper_format, paper_format )
    if orientation is None:
        orientation		= ORIENTATION
    if page_margin is None:
        page_margin		= PAGE_MARGIN
    pdf				= fpdf.FPDF(
        orientation	= orientation,
        format		= paper_format,
    )
    pdf.set_margin( 0 )
    pdf.set_auto_page_break( False )
    inv_dim			= Coordinate(
        x	= pdf.epw / MM_IN - page_margin * 2,
        y	= pdf.eph / MM_IN - page_margin * 2,
    )
    offset			= Coordinate( page_margin * MM_IN, page_margin * MM_IN )
    log.debug( f'Page: {paper_format} {orientation}; invoice {inv_dim.x:6.3f}" x {inv_dim.y:6.3f}"' )
    return orientation, pdf, inv_dim, offset
