"""app.integrations — External service gateway modules.

All outbound calls from the report synchronizer to report storage go
through a gateway client in this package, never via bare ``requests``
calls in services or blueprints.

Current gateways:
  sheets_gateway.SheetsGateway      — remote sheet gateway over HTTP
  sheets_gateway.LocalSheetsGateway — same contract, in-process
"""
