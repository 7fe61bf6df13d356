"""
The MODEL layer contains pure data structures: particle arena, vectors, camera.
It has NO knowledge of the GUI (Qt) or the Visualization (PyVista).
"""
