"""xlshift: address algebra and structural row/column editing for spreadsheets."""

__version__ = "0.1.0"
