"""Estate Planner — deceased-estate tax and liquidity modelling service."""
