"""Console output and manifest helpers"""
