"""Namespace for stream sources; it currently holds no modules."""