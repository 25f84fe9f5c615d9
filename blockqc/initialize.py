"""
File:       blockqc/initialize.py
Brief:      Dask cluster set-up for the "dask" engine.
"""
# Third party library imports
from distributed import Client, LocalCluster


def initialize_dask(n_workers: int, *, processes: bool = True) -> Client:
    """Start a local Dask cluster with single-threaded workers and return a client connected to it."""
    cluster = LocalCluster(n_workers=n_workers, threads_per_worker=1, processes=processes,
                           dashboard_address=None)
    return Client(cluster)


def shutdown_dask(client: Client) -> None:
    cluster = client.cluster
    client.close()
    if cluster is not None:
        cluster.close()
