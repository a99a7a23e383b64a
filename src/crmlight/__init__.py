"""crmlight - a small terminal CRM with an in-memory data layer."""

__version__ = "0.1.0"
