"""
Analytics Serializers - Query parameters for the statistics endpoints
"""

from rest_framework import serializers


class DateRangeSerializer(serializers.Serializer):
    """Optional inclusive date range for statistics queries."""
    date_from = serializers.DateField(required=False, allow_null=True, default=None)
    date_to = serializers.DateField(required=False, allow_null=True, default=None)

    def validate(self, data):
        start = data.get('date_from')
        end = data.get('date_to')

        if start and end and end < start:
            raise serializers.ValidationError(
                {'date_to': "date_to must be on or after date_from"}
            )

        return data
