"""Form-side behaviour of the travel booking form.

Kept import-free: the schema module reads ``forms.presets`` and the form
modules read the schemas back.
"""
