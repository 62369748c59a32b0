from rest_framework import serializers


class DeleteFileSerializer(serializers.Serializer):
    bucket = serializers.CharField(max_length=100)
    path = serializers.CharField(max_length=1024)

    def validate_path(self, value: str) -> str:
        value = value.strip().lstrip("/")
        if not value or ".." in value.split("/"):
            raise serializers.ValidationError("Invalid path.")
        return value
