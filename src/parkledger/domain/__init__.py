"""Domain layer: value objects, aggregates, tariff and the ledger engine"""
