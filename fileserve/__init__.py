"""
fileserve - a basic HTTP(S) static file server
- Serve a directory over HTTP, or HTTPS with a PEM cert/key pair
- Optional CORS header allowing requests from any origin
- Extra custom headers on every response
"""

__version__ = "0.1.0"
