"""Medallion layers: Silver cleaning pipeline and Gold star-schema builders."""
