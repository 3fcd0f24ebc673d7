from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .permissions import HasRoleSession, IsManagerSession
from .serializers import ChangePasswordSerializer, RoleLoginSerializer
from .services import RoleSessionService


class RoleLoginView(APIView):
    def post(self, request):
        serializer = RoleLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        role = serializer.validated_data["role"]
        if not RoleSessionService.login(request, role, serializer.validated_data["password"]):
            return Response({"error": "Incorrect password."}, status=status.HTTP_401_UNAUTHORIZED)
        return Response({"role": role})


class RoleLogoutView(APIView):
    def post(self, request):
        RoleSessionService.logout(request)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CurrentRoleView(APIView):
    permission_classes = [HasRoleSession]

    def get(self, request):
        return Response({"role": RoleSessionService.current_role(request)})


class ChangePasswordView(APIView):
    permission_classes = [IsManagerSession]

    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        changed = RoleSessionService.change_password(
            serializer.validated_data["current_password"],
            serializer.validated_data["new_password"],
        )
        if not changed:
            return Response({"error": "Incorrect current password."}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"message": "Password updated successfully."})
