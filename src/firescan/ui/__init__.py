"""Server-rendered viewer pages.

- ``/`` lists the configured collections with their document counts
- ``/collection/<name>?page=<n>`` shows record ``n`` plus the batch around it

The collection page embeds its whole batch as JSON so that stepping between
records of the same batch happens in the browser; crossing a batch boundary is a
normal page request.
"""
