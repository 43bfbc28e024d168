"""
chuk-mcp-wfs: Viewport-cached WFS Building Footprint MCP Server

Fetches LoD1 building footprints from an OGC Web Feature Service for the
current map viewport. Viewport changes are debounced, quantized into cache
keys and coalesced so that panning and zooming issues as few requests as
possible. Computes building height statistics over the loaded features.
"""
