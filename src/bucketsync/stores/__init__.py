"""Storage backends behind one Store interface.

- Store / StoreObject: Backend-neutral enumeration, create and delete
- MultipartStore: Store accepting chunked upload sessions
- Listing / ListingResult: Lazy enumeration with a deferred outcome
- LocalStore: Local filesystem
- S3Store: S3-compatible object store on boto3
"""

from bucketsync.stores.base import MultipartStore, Store, StoreObject
from bucketsync.stores.factory import open_store, parse_s3_location
from bucketsync.stores.listing import Listing, ListingResult
from bucketsync.stores.local import LocalObject, LocalStore
from bucketsync.stores.s3 import S3Object, S3Store

__all__ = [
    "Listing",
    "ListingResult",
    "LocalObject",
    "LocalStore",
    "MultipartStore",
    "S3Object",
    "S3Store",
    "Store",
    "StoreObject",
    "open_store",
    "parse_s3_location",
]
