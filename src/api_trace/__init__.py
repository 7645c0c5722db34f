"""Trace API calls in ASP.NET WebForms code back to the UI controls that trigger them."""

__version__ = "0.1.0"
