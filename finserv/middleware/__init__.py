"""HTTP middleware: CORS, Brotli compression, and request throttling."""
