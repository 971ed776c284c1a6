"""
Document generation for OOH Ops.

Composers turn business records into drawing instructions; the renderer
turns instructions into PDF bytes. Import the submodules directly.
"""
