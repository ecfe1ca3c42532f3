"""
The MODEL layer contains pure data structures and file I/O.
The catalog has NO knowledge of the GUI (Qt); the project I/O only talks to
the canvas through its JSON entry points.
"""
