"""
invoice-harvester: track uploaded invoice PDFs through extraction, correct
the extracted data inline and export it to CSV.
"""

__version__ = "0.1.0"
