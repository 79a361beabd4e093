"""Kitchen Hand Guide — the kitchen's product and preparation catalog.

Server-rendered pages for browsing supplier products and prep procedures,
with editing behind a staff login.
"""

__version__ = "0.1.0"
