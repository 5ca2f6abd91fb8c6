"""Read and write CBOR and JSON data, with type tags, container writers and traced errors."""

__version__ = "0.1.0"
__all__ = ["cbor", "exceptions", "json", "metawriters", "typeinfo"]