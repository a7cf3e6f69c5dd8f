"""HTTP surface of edt_gateway: aiohttp app, routes and middlewares."""
