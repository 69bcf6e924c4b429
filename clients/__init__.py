# Infrastructure clients
from clients.backend_client import BackendClient
from clients.valkey_client import ValkeyClient
