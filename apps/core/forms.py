"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Shared form helpers for the JSON API.
-------------------------------------------------------------------------
"""
from django.core.exceptions import FieldDoesNotExist


class ModelDefaultsFormMixin:
    """
    Fill fields missing from a create request with the model defaults.

    JSON clients omit optional fields, which a ModelForm would otherwise
    treat as blank (required error, or False for checkboxes).
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.is_bound or self.instance.pk:
            return
        data = self.data.copy()
        for name in self.fields:
            if name in data:
                continue
            try:
                model_field = self._meta.model._meta.get_field(name)
            except FieldDoesNotExist:
                continue
            if model_field.has_default():
                data[name] = model_field.get_default()
        self.data = data
