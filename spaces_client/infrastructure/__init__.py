"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- storage: Spaces object storage (boto3) and an in-memory stand-in
- cdn: DigitalOcean CDN management API (httpx)

These implement the gateway protocols in core.gateways.
"""
