"""Contract core: auction engine, state, storage, fees and host runtime"""
