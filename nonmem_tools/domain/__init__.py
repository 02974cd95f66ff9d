"""Domain layer for NONMEM Tools.

This layer contains the conversion, validation and PK logic together with
its entities. It is independent of file formats and the command line.
"""
