"""
Service context extraction for log lines.

Identifies the running instance so that log output from several engine
instances behind one load balancer can be told apart.
"""

from functools import lru_cache
import os


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'seatlock')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostname when orchestrated, PID for local development
    instance = os.getenv('HOSTNAME', '')[:12] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
