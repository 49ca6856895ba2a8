"""Infrastructure layer: in-memory repositories"""
