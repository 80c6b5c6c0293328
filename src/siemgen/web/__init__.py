"""Web API for siemgen."""
