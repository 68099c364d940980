from django.urls import register_converter


class IdConverter:
    """Primary keys that fit a BIGINT column; longer digit runs 404"""
    regex = '[0-9]{1,18}'

    def to_python(self, value):
        return int(value)

    def to_url(self, value):
        return str(value)


register_converter(IdConverter, 'id')
