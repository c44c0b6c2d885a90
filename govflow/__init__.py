"""Government contracting back office: RFQ to shipment workflow and lead matching."""

__version__ = "1.0.0"
