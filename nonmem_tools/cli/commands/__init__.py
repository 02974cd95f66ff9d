"""Click commands for the nonmem-tools CLI."""
