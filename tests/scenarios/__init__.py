"""End-to-end scenarios for the front controller.

Each scenario serves presenters through the ASGI adapter and drives them
with an HTTP test client, covering one aspect of the request lifecycle.
"""
