"""
Casa Color backend.

Layers:
- domain: device, proxy, wallet and health entities; gateway interfaces;
  optimistic state reconciliation rules
- application: device state controllers, proxy decisions, DTOs
- infrastructure: httpx clients for Home Assistant and Circle, entity
  secret encryption, health checks
- presentation: FastAPI routers
- shared: constants, logging, secret-file loading
- main: settings, dependency container, ASGI app and command line
"""
