"""HTTP gateway — POST /ask and GET /health for the browser UI."""
