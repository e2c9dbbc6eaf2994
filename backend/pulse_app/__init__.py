"""Runtime side of tickpulse: feed client, services and HTTP surface."""
