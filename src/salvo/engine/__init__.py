"""Game engine: coordinates, fleets, shot resolution and the match state machine."""
