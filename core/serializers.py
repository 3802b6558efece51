from rest_framework import serializers


class DocumentModelSerializer(serializers.ModelSerializer):
    """
    ModelSerializer for models that keep sub-documents in JSON columns.

    Nested serializers on these models only validate the shape of a JSON
    value, so their validated data is written to the column as-is instead
    of going through DRF's nested-write guard.
    """

    def create(self, validated_data):
        return self.Meta.model.objects.create(**validated_data)

    def update(self, instance, validated_data):
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        return instance
