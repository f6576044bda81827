"""
Group-stage tournament engine: standings, match predictions, next-round
what-if scenarios and season projections over static JSON data.
"""
