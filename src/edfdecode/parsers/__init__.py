"""Decoders for the EDF header, data records and EDF+ annotations."""
