"""Renders an OperationArtifact into a TypeScript React Query module."""

import json
from datetime import datetime, timezone

from ..core.composer import InfiniteQueryShape, OperationArtifact
from ..core.naming import derive_file_path

UTILS_FOLDER = "__oprq__"


def utils_import_path(method: str, path: str) -> str:
    """Relative import of the shared utilities folder, which sits beside the namespace folder."""
    depth = len(derive_file_path(method, path).parts)
    return "../" * depth + UTILS_FOLDER


class OperationFileRenderer:
    """Substitutes one artifact into the module template."""

    def __init__(self, artifact: OperationArtifact, utils_path: str | None = None):
        self.artifact = artifact
        self.utils_path = utils_path or utils_import_path(artifact.method, artifact.path)

    @property
    def _args_default(self) -> str:
        return " = {}" if self.artifact.args_optional else ""

    def render(self, generated_at: datetime | None = None) -> str:
        a = self.artifact
        timestamp = (generated_at or datetime.now(timezone.utc)).isoformat()
        sections = [
            self._render_header(timestamp),
            self._render_imports(),
            self._render_types(),
            self._render_api_url(),
            self._render_query_key(),
            self._render_repository(),
        ]
        hooks = []
        if a.hook_plan.query:
            hooks.append(self._render_query_hook())
        if a.hook_plan.suspense:
            hooks.append(self._render_suspense_hook())
        if a.hook_plan.infinite is not None:
            hooks.append(self._render_infinite_hook(a.hook_plan.infinite))
        if a.hook_plan.mutation:
            hooks.append(self._render_mutation_hook())
        return "\n".join(s for s in sections + hooks if s) + "\n"

    def _render_header(self, timestamp: str) -> str:
        a = self.artifact
        return (
            "/**\n"
            f" * {a.method.upper()} {a.path}\n"
            f" * {a.summary or 'Auto-generated API file'}\n"
            f" * Generated at: {timestamp}\n"
            f" * Source: {a.query_key.namespace}\n"
            " */"
        )

    def _render_imports(self) -> str:
        plan = self.artifact.hook_plan
        imports = []
        if plan.uses_query:
            imports += ["useQuery", "type UseQueryOptions", "type UseQueryResult"]
        if plan.suspense:
            imports += ["useSuspenseQuery", "type UseSuspenseQueryResult"]
        if plan.mutation:
            imports += ["useMutation", "type UseMutationOptions", "type UseMutationResult"]
        if plan.infinite is not None:
            imports += [
                "useInfiniteQuery",
                "type UseInfiniteQueryOptions",
                "type UseInfiniteQueryResult",
                f"type {plan.infinite.data_wrapper}",
            ]

        lines = []
        if imports:
            joined = ",\n  ".join(imports)
            lines.append(f"import {{\n  {joined},\n}} from {json.dumps(self.artifact.library.import_path)};")
        lines.append(
            "import { StringReplacer, getHttpClient, request, type RequestConfig } "
            f"from {json.dumps(self.utils_path)};"
        )
        return "\n".join(lines)

    def _render_types(self) -> str:
        a = self.artifact
        lines = ["", "// ===== Types ====="]
        if a.definitions:
            lines.append("// Referenced Types")
            lines.append("\n\n".join(d.render() for d in a.definitions))
            lines.append("")
        lines += [
            f"export type PathParams = {a.path_params.render()};",
            "",
            f"export type QueryParams = {a.query_params.render()};",
            "",
            f"export type Body = {a.body_type.render()};",
            "",
            f"export type Response = {a.response_type.render()};",
            "",
            f"export type ErrorResponse = {a.error_type.render()};",
            "",
            "export interface RequestArgs {",
            f"  pathParams{'' if a.required.path else '?'}: PathParams;",
            f"  queryParams{'' if a.required.query else '?'}: QueryParams;",
            f"  body{'' if a.required.body else '?'}: Body;",
            "  config?: RequestConfig;",
            "}",
        ]
        return "\n".join(lines)

    def _render_api_url(self) -> str:
        a = self.artifact
        url = json.dumps(f"{a.query_key.namespace}:{a.path}")
        return f"\n// ===== API URL =====\nconst API_URL = {url} as const;"

    def _render_query_key(self) -> str:
        key = self.artifact.query_key
        namespace, method, path, argument = key.parts
        return (
            "\n// ===== Query Keys =====\n"
            f"export const {self.artifact.operation_name}QueryKey = ({argument}: RequestArgs) =>\n"
            f"  [{json.dumps(namespace)}, {json.dumps(method)}, {json.dumps(path)}, {argument}] as const;"
        )

    def _render_repository(self) -> str:
        name = self.artifact.operation_name
        return (
            "\n// ===== Repository =====\n"
            f"export const {name} = async (args: RequestArgs{self._args_default}): Promise<Response> => {{\n"
            "  const url = new StringReplacer(API_URL).replaceText(args?.pathParams ?? {});\n"
            f"{self._render_http_call()}\n"
            "};"
        )

    def _render_http_call(self) -> str:
        method = self.artifact.method.lower()
        if method in ("get", "head", "options"):
            call = f"http.{method}(url, {{ params: args?.queryParams, ...args?.config }})"
        elif method == "delete":
            call = "http.delete(url, { params: args?.queryParams, data: args?.body, ...args?.config })"
        else:
            call = f"http.{method}(url, args?.body, {{ params: args?.queryParams, ...args?.config }})"
        return f"  const http = getHttpClient();\n  return request({call});"

    def _render_query_hook(self) -> str:
        a = self.artifact
        return f"""
// ===== React Query Hook =====
export const use{a.display_name}Query = <TData = Response, TError = ErrorResponse>(
  req: RequestArgs{self._args_default},
  options?: Omit<UseQueryOptions<Response, TError, TData>, "queryKey" | "queryFn">
): UseQueryResult<TData, TError> => {{
  return useQuery({{
    queryKey: {a.operation_name}QueryKey(req),
    queryFn: () => {a.operation_name}(req),
    ...options,
  }});
}};"""

    def _render_suspense_hook(self) -> str:
        a = self.artifact
        return f"""
// ===== Suspense Query Hook =====
export const use{a.display_name}SuspenseQuery = <TData = Response, TError = ErrorResponse>(
  req: RequestArgs{self._args_default},
  options?: Omit<UseQueryOptions<Response, TError, TData>, "queryKey" | "queryFn">
): UseSuspenseQueryResult<TData, TError> => {{
  return useSuspenseQuery({{
    queryKey: {a.operation_name}QueryKey(req),
    queryFn: () => {a.operation_name}(req),
    ...options,
  }});
}};"""

    def _render_infinite_hook(self, shape: InfiniteQueryShape) -> str:
        a = self.artifact
        data = f"{shape.data_wrapper}<Response>"
        type_args = ["Response", "ErrorResponse", data, "Response", f"ReturnType<typeof {a.operation_name}QueryKey>"]
        if shape.page_param_type_arg:
            type_args.append("TPageParam")
        options = (
            "Omit<\n"
            f"    UseInfiniteQueryOptions<{', '.join(type_args)}>,\n"
            '    "queryKey" | "queryFn"\n'
            "  >"
        )
        if shape.requires_next_page_param:
            options += (
                " & {\n"
                "    getNextPageParam: (lastPage: Response, allPages: Response[]) => TPageParam | undefined;\n"
                "  }"
            )
        return f"""
// ===== Infinite Query Hook =====
export const use{a.display_name}InfiniteQuery = <TPageParam = unknown>(
  req: RequestArgs{self._args_default},
  options: {options}
): UseInfiniteQueryResult<{data}, ErrorResponse> => {{
  return useInfiniteQuery({{
    queryKey: {a.operation_name}QueryKey(req),
    queryFn: ({{ pageParam }}) => {a.operation_name}({{
      ...req,
      queryParams: {{ ...req.queryParams, ...(pageParam as Record<string, unknown>) }},
    }} as RequestArgs),
    ...options,
  }});
}};"""

    def _render_mutation_hook(self) -> str:
        a = self.artifact
        return f"""
// ===== Mutation Hook =====
export const use{a.display_name}Mutation = <TContext = unknown>(
  options?: Omit<
    UseMutationOptions<Response, ErrorResponse, RequestArgs, TContext>,
    "mutationFn"
  >
): UseMutationResult<Response, ErrorResponse, RequestArgs, TContext> => {{
  return useMutation({{
    mutationFn: {a.operation_name},
    ...options,
  }});
}};"""


def render_operation_file(
    artifact: OperationArtifact,
    utils_path: str | None = None,
    generated_at: datetime | None = None,
) -> str:
    return OperationFileRenderer(artifact, utils_path).render(generated_at)
