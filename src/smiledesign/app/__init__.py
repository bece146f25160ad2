"""
The APP layer holds the mutable session state shared with the canvas.
It calls into the pure MODEL layer and notifies listeners through Qt signals.
"""
