"""
Cognito identity construct for Munhuolto.

Realizes identity-family specs in declaration order:
1. User pool
2. User pool client
3. Identity pool
4. IAM roles trusting the identity pool
5. User pool groups bound to the roles
6. Identity pool role attachment

'ref:<LogicalName>.<attr>' strings inside specs are resolved against the
constructs realized so far, which is why specs may only reference earlier
entries.
"""

from typing import Any, Callable, Dict, Sequence

from aws_cdk import (
    aws_cognito as cognito,
    aws_iam as iam,
    RemovalPolicy,
)
from constructs import Construct

from .specs import (
    CONSTRUCT_ATTRIBUTE,
    FederatedIdentitySpec,
    GroupSpec,
    IdentityClientSpec,
    IdentityStoreSpec,
    RemovalPolicy as SpecRemovalPolicy,
    ResourceSpec,
    RoleAttachmentSpec,
    RoleSpec,
    is_ref,
    parse_ref,
)


REMOVAL_POLICIES = {
    SpecRemovalPolicy.RETAIN: RemovalPolicy.RETAIN,
    SpecRemovalPolicy.DESTROY: RemovalPolicy.DESTROY,
}


class MunhuoltoIdentityConstruct(Construct):
    """
    Construct that creates the Munhuolto identity resources.

    Attributes:
        resources: Logical name -> realized construct, in declaration order
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        specs: Sequence[ResourceSpec],
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.resources: Dict[str, Any] = {}

        realizers: Dict[type, Callable[[Any], Any]] = {
            IdentityStoreSpec: self._create_user_pool,
            IdentityClientSpec: self._create_user_pool_client,
            FederatedIdentitySpec: self._create_identity_pool,
            RoleSpec: self._create_role,
            GroupSpec: self._create_group,
            RoleAttachmentSpec: self._create_role_attachment,
        }

        for spec in specs:
            realize = realizers.get(type(spec))
            if realize is None:
                raise ValueError(f"No realizer for spec kind '{spec.kind}'")
            self.resources[spec.logical_name] = realize(spec)

    def resolve(self, value: Any) -> Any:
        """Resolve a reference string; other values pass through unchanged."""
        if not is_ref(value):
            return value
        logical_name, attribute = parse_ref(value)
        if logical_name not in self.resources:
            raise ValueError(f"Referenced resource '{logical_name}' not found.")
        resource = self.resources[logical_name]
        if attribute == CONSTRUCT_ATTRIBUTE:
            return resource
        attr_val = getattr(resource, attribute, None)
        if attr_val is None:
            raise ValueError(f"Attribute '{attribute}' not found on resource '{logical_name}'")
        return attr_val

    def _create_user_pool(self, spec: IdentityStoreSpec) -> cognito.UserPool:
        policy = spec.password_policy
        return cognito.UserPool(
            self,
            spec.logical_name,
            user_pool_name=spec.user_pool_name,
            self_sign_up_enabled=spec.self_sign_up_enabled,
            sign_in_aliases=cognito.SignInAliases(
                **{alias: True for alias in spec.sign_in_aliases}
            ),
            auto_verify=cognito.AutoVerifiedAttrs(
                **{attr: True for attr in spec.auto_verify}
            ),
            standard_attributes=cognito.StandardAttributes(**{
                attr.name: cognito.StandardAttribute(required=attr.required, mutable=attr.mutable)
                for attr in spec.standard_attributes
            }),
            custom_attributes={
                attr.name: cognito.StringAttribute(
                    min_len=attr.min_len,
                    max_len=attr.max_len,
                    mutable=attr.mutable,
                )
                for attr in spec.custom_attributes
            },
            password_policy=cognito.PasswordPolicy(
                min_length=policy.min_length,
                require_lowercase=policy.require_lowercase,
                require_uppercase=policy.require_uppercase,
                require_digits=policy.require_digits,
                require_symbols=policy.require_symbols,
            ),
            account_recovery=getattr(cognito.AccountRecovery, spec.account_recovery),
            removal_policy=REMOVAL_POLICIES[spec.removal_policy],
        )

    def _create_user_pool_client(self, spec: IdentityClientSpec) -> cognito.UserPoolClient:
        return cognito.UserPoolClient(
            self,
            spec.logical_name,
            user_pool=self.resolve(spec.user_pool),
            user_pool_client_name=spec.client_name,
            generate_secret=spec.generate_secret,
            auth_flows=cognito.AuthFlow(**{flow: True for flow in spec.auth_flows}),
            o_auth=cognito.OAuthSettings(
                flows=cognito.OAuthFlows(
                    authorization_code_grant='authorization_code_grant' in spec.oauth_flows,
                    implicit_code_grant='implicit_code_grant' in spec.oauth_flows,
                ),
                scopes=[getattr(cognito.OAuthScope, scope.upper()) for scope in spec.oauth_scopes],
                callback_urls=list(spec.callback_urls),
                logout_urls=list(spec.logout_urls),
            ),
            supported_identity_providers=[
                getattr(cognito.UserPoolClientIdentityProvider, provider)
                for provider in spec.identity_providers
            ],
        )

    def _create_identity_pool(self, spec: FederatedIdentitySpec) -> cognito.CfnIdentityPool:
        return cognito.CfnIdentityPool(
            self,
            spec.logical_name,
            identity_pool_name=spec.identity_pool_name,
            allow_unauthenticated_identities=spec.allow_unauthenticated_identities,
            cognito_identity_providers=[
                cognito.CfnIdentityPool.CognitoIdentityProviderProperty(
                    client_id=self.resolve(spec.client_id),
                    provider_name=self.resolve(spec.provider_name),
                ),
            ],
        )

    def _create_role(self, spec: RoleSpec) -> iam.Role:
        principal = spec.federated_principal
        statements = []
        for grant in spec.grants:
            conditions = None
            if grant.condition is not None:
                conditions = {
                    grant.condition.operator: {
                        grant.condition.key: list(grant.condition.values),
                    },
                }
            statements.append(iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=sorted(grant.actions),
                resources=[self.resolve(grant.resource_pattern)],
                conditions=conditions,
            ))

        return iam.Role(
            self,
            spec.logical_name,
            role_name=spec.role_name,
            assumed_by=iam.FederatedPrincipal(
                principal,
                {
                    'StringEquals': {
                        f'{principal}:aud': self.resolve(spec.trusted_identity_pool),
                    },
                    'ForAnyValue:StringLike': {
                        f'{principal}:amr': 'authenticated',
                    },
                },
                spec.assume_role_action,
            ),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(name)
                for name in spec.managed_policies
            ],
            inline_policies={
                spec.policy_name: iam.PolicyDocument(statements=statements),
            },
        )

    def _create_group(self, spec: GroupSpec) -> cognito.CfnUserPoolGroup:
        return cognito.CfnUserPoolGroup(
            self,
            spec.logical_name,
            user_pool_id=self.resolve(spec.user_pool_id),
            group_name=spec.group_name,
            description=spec.description,
            precedence=spec.precedence,
            role_arn=self.resolve(spec.role_arn),
        )

    def _create_role_attachment(
        self,
        spec: RoleAttachmentSpec
    ) -> cognito.CfnIdentityPoolRoleAttachment:
        provider_name = self.resolve(spec.provider_name)
        client_id = self.resolve(spec.client_id)
        return cognito.CfnIdentityPoolRoleAttachment(
            self,
            spec.logical_name,
            identity_pool_id=self.resolve(spec.identity_pool_id),
            roles={
                'authenticated': self.resolve(spec.authenticated_role_arn),
            },
            role_mappings={
                'cognito': cognito.CfnIdentityPoolRoleAttachment.RoleMappingProperty(
                    type=spec.mapping_type,
                    ambiguous_role_resolution=spec.ambiguous_role_resolution,
                    identity_provider=f'{provider_name}:{client_id}',
                ),
            },
        )
