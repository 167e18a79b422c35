"""
Middleware for the Ingester service.

Error handling and protocol adaptation.

Note: Import directly from submodules:

    from ingester.middleware.error_handler import handle_ingester_error
"""
