"""Resolution policy and the ports adapters implement."""
