"""Relay SharePoint webhook notifications to an Azure Service Bus queue."""

__version__ = "0.1.0"
